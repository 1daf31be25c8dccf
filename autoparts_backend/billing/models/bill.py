# billing/models/bill.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

User = settings.AUTH_USER_MODEL


class Bill(models.Model):
    """
    A saved GST tax invoice.

    GUARANTEES:
    - Totals are the exact sums of the line items at save time
    - bill_number is minted once by the numbering service
    - After creation only remaining_amount (payments) and pdf_path
      (document storage) may change
    - remaining_amount stays within [0, total_amount] and never increases
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    bill_number = models.CharField(max_length=64, unique=True)
    invoice_date = models.DateField(default=timezone.localdate)

    party_name = models.CharField(max_length=255, db_index=True)
    party_address = models.TextField(blank=True, default="")
    party_gstin = models.CharField(max_length=15, blank=True, default="", db_index=True)
    party_phone = models.CharField(max_length=10, blank=True, default="")
    place_of_supply = models.CharField(max_length=128, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    cgst_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    sgst_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total_tax = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    remaining_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    pdf_path = models.CharField(max_length=255, null=True, blank=True)

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bills_created",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    # Fields that may move after the bill is saved.
    _MUTABLE_FIELDS = ("remaining_amount", "pdf_path", "updated_at")

    _LOCKED_FIELDS = (
        "bill_number",
        "invoice_date",
        "party_name",
        "party_address",
        "party_gstin",
        "party_phone",
        "place_of_supply",
        "notes",
        "subtotal",
        "cgst_amount",
        "sgst_amount",
        "total_tax",
        "total_amount",
        "created_by_id",
    )

    def clean(self):
        remaining = Decimal(self.remaining_amount or 0)
        total = Decimal(self.total_amount or 0)
        if remaining < 0 or remaining > total:
            raise ValidationError("remaining_amount must be between 0 and total_amount")

    def _validate_immutable(self, previous: "Bill"):
        for field in self._LOCKED_FIELDS:
            if getattr(self, field) != getattr(previous, field):
                raise ValidationError(f"Bill {previous.bill_number}: '{field}' cannot be changed")

        if Decimal(self.remaining_amount) > Decimal(previous.remaining_amount):
            raise ValidationError(f"Bill {previous.bill_number}: remaining amount cannot increase")

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            previous = Bill.objects.filter(pk=self.pk).first()
            if previous is not None:
                self._validate_immutable(previous)

        self.clean()
        super().save(*args, **kwargs)

    @property
    def paid_amount(self) -> Decimal:
        return Decimal(self.total_amount) - Decimal(self.remaining_amount)

    @property
    def is_paid(self) -> bool:
        return Decimal(self.remaining_amount) == Decimal("0.00")

    def __str__(self):
        return f"{self.bill_number} | {self.party_name} | {self.total_amount}"
