# products/models/scan_history.py

"""
SCAN HISTORY (INVENTORY AUDIT TRAIL)

Immutable record of every scanner / alert action against a product.

GUARANTEES:
- Append-only (no updates, no deletes)
- Field groups match the action:
    sold, stock_up      -> stock fields present, location fields absent
    location_change     -> location fields present, stock fields absent
    view, flag, unflag  -> neither group present
- new_stock == max(0, old_stock + quantity_change) whenever all three are set
  (sales clamp at zero, so the requested change may exceed what was on hand)
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .product import Product


class ScanHistory(models.Model):
    ACTION_VIEW = "view"
    ACTION_SOLD = "sold"
    ACTION_STOCK_UP = "stock_up"
    ACTION_LOCATION_CHANGE = "location_change"
    ACTION_FLAG = "flag"
    ACTION_UNFLAG = "unflag"

    ACTION_CHOICES = [
        (ACTION_VIEW, "Viewed"),
        (ACTION_SOLD, "Sold"),
        (ACTION_STOCK_UP, "Stocked Up"),
        (ACTION_LOCATION_CHANGE, "Location Changed"),
        (ACTION_FLAG, "Flagged for Review"),
        (ACTION_UNFLAG, "Review Cleared"),
    ]

    STOCK_ACTIONS = {ACTION_SOLD, ACTION_STOCK_UP}
    LOCATION_ACTIONS = {ACTION_LOCATION_CHANGE}

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product, on_delete=models.CASCADE, related_name="scan_history"
    )

    action = models.CharField(max_length=20, choices=ACTION_CHOICES, db_index=True)

    quantity_change = models.IntegerField(null=True, blank=True)
    old_stock = models.PositiveIntegerField(null=True, blank=True)
    new_stock = models.PositiveIntegerField(null=True, blank=True)

    old_location = models.CharField(
        max_length=4, choices=Product.LOCATION_CHOICES, null=True, blank=True
    )
    new_location = models.CharField(
        max_length=4, choices=Product.LOCATION_CHOICES, null=True, blank=True
    )

    notes = models.TextField(blank=True, default="")

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="scan_records",
    )

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "scan history"

    def clean(self):
        stock_fields = (self.quantity_change, self.old_stock, self.new_stock)
        has_stock = any(v is not None for v in stock_fields)
        has_location = self.old_location is not None or self.new_location is not None

        if self.action in self.STOCK_ACTIONS:
            if any(v is None for v in stock_fields):
                raise ValidationError(f"{self.action} requires quantity_change, old_stock and new_stock")
            if has_location:
                raise ValidationError(f"{self.action} must not carry location fields")
        elif self.action in self.LOCATION_ACTIONS:
            if not self.new_location:
                raise ValidationError("location_change requires new_location")
            if has_stock:
                raise ValidationError("location_change must not carry stock fields")
        else:
            if has_stock or has_location:
                raise ValidationError(f"{self.action} must not carry stock or location fields")

        if self.action == self.ACTION_SOLD and self.quantity_change is not None and self.quantity_change >= 0:
            raise ValidationError("sold requires a negative quantity_change")
        if self.action == self.ACTION_STOCK_UP and self.quantity_change is not None and self.quantity_change <= 0:
            raise ValidationError("stock_up requires a positive quantity_change")

        if all(v is not None for v in stock_fields):
            expected = max(0, self.old_stock + self.quantity_change)
            if self.new_stock != expected:
                raise ValidationError(
                    f"new_stock {self.new_stock} does not match old_stock "
                    f"{self.old_stock} + change {self.quantity_change}"
                )

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("ScanHistory records are immutable")
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("ScanHistory records are immutable and cannot be deleted")

    def __str__(self):
        return f"{self.product_id} | {self.action} | {self.created_at:%Y-%m-%d %H:%M}"
