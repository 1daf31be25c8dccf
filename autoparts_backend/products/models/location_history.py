# products/models/location_history.py

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .product import Product


class ProductLocationHistory(models.Model):
    """
    Append-only record of a product moving between warehouse locations.
    old_location is NULL when the product had never been placed.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product, on_delete=models.CASCADE, related_name="location_history"
    )

    old_location = models.CharField(
        max_length=4, choices=Product.LOCATION_CHOICES, null=True, blank=True
    )
    new_location = models.CharField(max_length=4, choices=Product.LOCATION_CHOICES)

    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="location_changes",
    )
    notes = models.TextField(blank=True, default="")

    changed_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-changed_at"]
        verbose_name_plural = "product location history"

    def clean(self):
        if self.old_location and self.old_location == self.new_location:
            raise ValidationError("old_location and new_location must differ")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("ProductLocationHistory records are immutable")
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("ProductLocationHistory records are immutable and cannot be deleted")

    def __str__(self):
        return f"{self.product_id}: {self.old_location or '-'} -> {self.new_location}"
