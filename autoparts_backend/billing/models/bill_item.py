# billing/models/bill_item.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class BillItem(models.Model):
    """
    One GST line of a Bill.

    RULES:
    - Amounts come from billing.services.tax.compute_line
    - hsn_sac is kept as the literal text the operator entered
    - Write-once: lines never change after the bill is saved
    """

    UNIT_PCS = "pcs"
    UNIT_KG = "kg"
    UNIT_SET = "set"
    UNIT_BOX = "box"

    UNIT_CHOICES = [
        (UNIT_PCS, "Pcs"),
        (UNIT_KG, "Kg"),
        (UNIT_SET, "Set"),
        (UNIT_BOX, "Box"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    bill = models.ForeignKey(
        "billing.Bill",
        on_delete=models.CASCADE,
        related_name="items",
    )
    position = models.PositiveIntegerField(default=0)

    product = models.ForeignKey(
        "products.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bill_items",
    )

    description = models.CharField(max_length=500)
    hsn_sac = models.CharField(max_length=32, blank=True, default="")
    quantity = models.DecimalField(max_digits=12, decimal_places=2)
    unit = models.CharField(max_length=8, choices=UNIT_CHOICES, default=UNIT_PCS)
    rate = models.DecimalField(max_digits=12, decimal_places=2)

    taxable_value = models.DecimalField(max_digits=14, decimal_places=2)
    cgst_rate = models.DecimalField(max_digits=5, decimal_places=2)
    sgst_rate = models.DecimalField(max_digits=5, decimal_places=2)
    cgst_amount = models.DecimalField(max_digits=14, decimal_places=2)
    sgst_amount = models.DecimalField(max_digits=14, decimal_places=2)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2)

    class Meta:
        ordering = ["position"]

    def clean(self):
        expected = Decimal(self.taxable_value) + Decimal(self.cgst_amount) + Decimal(self.sgst_amount)
        if Decimal(self.total_amount) != expected:
            raise ValidationError("total_amount must equal taxable_value + cgst_amount + sgst_amount")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Bill items are immutable")
        self.clean()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.description} x {self.quantity} ({self.hsn_sac})"
