# quotations/models/order.py

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

User = settings.AUTH_USER_MODEL


class ActiveOrder(models.Model):
    """
    Fulfilment of an accepted quotation.

    STATUS FLOW (forward only):
        picking -> ready -> dispatched -> completed

    The model refuses any save that moves status backwards; which forward
    moves are allowed is decided in quotations.services.lifecycle.
    """

    STATUS_PICKING = "picking"
    STATUS_READY = "ready"
    STATUS_DISPATCHED = "dispatched"
    STATUS_COMPLETED = "completed"

    STATUS_CHOICES = [
        (STATUS_PICKING, "Picking"),
        (STATUS_READY, "Ready"),
        (STATUS_DISPATCHED, "Dispatched"),
        (STATUS_COMPLETED, "Completed"),
    ]

    STATUS_SEQUENCE = [STATUS_PICKING, STATUS_READY, STATUS_DISPATCHED, STATUS_COMPLETED]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order_number = models.CharField(max_length=64, unique=True)

    quotation = models.OneToOneField(
        "quotations.Quotation",
        on_delete=models.PROTECT,
        related_name="order",
    )

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_PICKING,
        db_index=True,
    )
    status_changed_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders_created",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    @classmethod
    def status_rank(cls, status: str) -> int:
        return cls.STATUS_SEQUENCE.index(status)

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            previous = ActiveOrder.objects.filter(pk=self.pk).only("status").first()
            if previous is not None and self.status_rank(self.status) < self.status_rank(previous.status):
                raise ValidationError(
                    f"Order {previous.order_number} cannot move back from "
                    f"'{previous.status}' to '{self.status}'"
                )
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.order_number} | {self.status}"


class OrderItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        ActiveOrder,
        on_delete=models.CASCADE,
        related_name="items",
    )
    quotation_item = models.ForeignKey(
        "quotations.QuotationItem",
        on_delete=models.PROTECT,
        related_name="order_items",
    )

    description = models.CharField(max_length=500)
    quantity = models.DecimalField(max_digits=12, decimal_places=2)

    is_picked = models.BooleanField(default=False)
    picked_at = models.DateTimeField(null=True, blank=True)
    picked_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items_picked",
    )

    class Meta:
        ordering = ["quotation_item__position"]

    def __str__(self):
        return f"{self.description} ({'picked' if self.is_picked else 'pending'})"
