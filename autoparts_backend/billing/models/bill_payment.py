# billing/models/bill_payment.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone


class BillPayment(models.Model):
    """
    Append-only payment against a Bill.

    RULES:
    - amount > 0 and never more than the bill's remaining amount
      (enforced by billing.services.payment_service under a row lock)
    - No updates / deletes (bill deletion cascades)
    """

    METHOD_CASH = "cash"
    METHOD_UPI = "upi"
    METHOD_BANK_TRANSFER = "bank_transfer"
    METHOD_CHEQUE = "cheque"
    METHOD_CARD = "card"

    METHOD_CHOICES = [
        (METHOD_CASH, "Cash"),
        (METHOD_UPI, "UPI"),
        (METHOD_BANK_TRANSFER, "Bank Transfer"),
        (METHOD_CHEQUE, "Cheque"),
        (METHOD_CARD, "Card"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    bill = models.ForeignKey(
        "billing.Bill",
        on_delete=models.CASCADE,
        related_name="payments",
    )

    amount = models.DecimalField(max_digits=14, decimal_places=2)
    method = models.CharField(max_length=16, choices=METHOD_CHOICES, default=METHOD_CASH)
    payment_date = models.DateField(default=timezone.localdate)
    note = models.CharField(max_length=255, blank=True, default="")

    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bill_payments_recorded",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]

    def clean(self):
        if self.amount is None or Decimal(self.amount) <= 0:
            raise ValidationError("Payment amount must be greater than zero")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Bill payments are append-only")
        self.full_clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Bill payments cannot be deleted")

    def __str__(self):
        return f"{self.bill_id} | {self.method} | {self.amount}"
