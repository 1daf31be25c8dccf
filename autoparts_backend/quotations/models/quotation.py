# quotations/models/quotation.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

User = settings.AUTH_USER_MODEL


class Quotation(models.Model):
    """
    A price offer to a customer.

    LIFECYCLE:
    - pending  -> accepted   (spawns exactly one ActiveOrder)
    - pending  -> declined
    - accepted / declined are terminal; nothing on a decided quotation
      changes afterwards
    """

    STATUS_PENDING = "pending"
    STATUS_ACCEPTED = "accepted"
    STATUS_DECLINED = "declined"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ACCEPTED, "Accepted"),
        (STATUS_DECLINED, "Declined"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    quotation_number = models.CharField(max_length=64, unique=True)

    party_name = models.CharField(max_length=255, db_index=True)
    party_address = models.TextField(blank=True, default="")
    vehicle_number = models.CharField(max_length=32, blank=True, default="")
    comments = models.TextField(blank=True, default="")

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
        db_index=True,
    )

    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="quotations_created",
    )
    decided_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="quotations_decided",
    )
    decided_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    @property
    def is_decided(self) -> bool:
        return self.status != self.STATUS_PENDING

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            previous = Quotation.objects.filter(pk=self.pk).only("status").first()
            if previous is not None and previous.status != self.STATUS_PENDING:
                raise ValidationError(
                    f"Quotation is {previous.status}; decided quotations cannot change"
                )
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.quotation_number} | {self.party_name} | {self.status}"


class QuotationItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    quotation = models.ForeignKey(
        Quotation,
        on_delete=models.CASCADE,
        related_name="items",
    )
    position = models.PositiveIntegerField(default=0)

    product = models.ForeignKey(
        "products.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="quotation_items",
    )

    description = models.CharField(max_length=500)
    quantity = models.DecimalField(max_digits=12, decimal_places=2)
    rate = models.DecimalField(max_digits=12, decimal_places=2)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2)

    class Meta:
        ordering = ["position"]

    def __str__(self):
        return f"{self.description} x {self.quantity}"
