# products/models/product.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils.text import slugify

from .category import Category


def default_images():
    return {"schema_version": 1, "items": []}


class Product(models.Model):
    """
    A stocked auto part.

    STOCK MODEL:
    - stock_quantity is the live count (never negative)
    - Every scanner/alert mutation appends a ScanHistory row
    - Every location change appends a ProductLocationHistory row
    - revision increments on each mutation (last write wins; the counter
      is exposed so clients can see that a concurrent change happened)
    """

    LOCATION_RA1 = "RA1"
    LOCATION_RA2 = "RA2"
    LOCATION_RA3 = "RA3"
    LOCATION_RA4 = "RA4"

    LOCATION_CHOICES = [
        (LOCATION_RA1, "Warehouse 1"),
        (LOCATION_RA2, "Warehouse 2"),
        (LOCATION_RA3, "Warehouse 3"),
        (LOCATION_RA4, "Warehouse 4"),
    ]

    LOCATIONS = {LOCATION_RA1, LOCATION_RA2, LOCATION_RA3, LOCATION_RA4}

    STATUS_ACTIVE = "active"
    STATUS_UNDER_REVIEW = "under_review"

    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_UNDER_REVIEW, "Under Review"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )

    product_code = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=255, db_index=True)
    slug = models.SlugField(max_length=280, unique=True, blank=True)
    sku = models.CharField(max_length=128, blank=True, default="", db_index=True)

    short_description = models.CharField(max_length=500, blank=True, default="")
    description = models.TextField(blank=True, default="")

    price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    stock_quantity = models.PositiveIntegerField(default=0)
    low_stock_threshold = models.PositiveIntegerField(null=True, blank=True)

    location = models.CharField(
        max_length=4,
        choices=LOCATION_CHOICES,
        null=True,
        blank=True,
        db_index=True,
    )

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_ACTIVE,
        db_index=True,
    )
    review_note = models.TextField(blank=True, default="")

    published = models.BooleanField(default=False)
    tags = models.JSONField(default=list, blank=True)
    images = models.JSONField(default=default_images, blank=True)

    revision = models.PositiveIntegerField(default=0)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products_created",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.name} ({self.product_code})"

    def clean(self):
        if self.price is not None and Decimal(self.price) < 0:
            raise ValidationError("Price cannot be negative")

        if self.location and self.location not in self.LOCATIONS:
            raise ValidationError(f"Unknown location '{self.location}'")

        if not (self.name or "").strip():
            raise ValidationError("Product name is required")

    def save(self, *args, **kwargs):
        if not self.slug:
            base = slugify(self.name or "")[:240] or "product"
            self.slug = f"{base}-{uuid.uuid4().hex[:8]}"
        return super().save(*args, **kwargs)

    @property
    def effective_low_stock_threshold(self) -> int:
        if self.low_stock_threshold is not None:
            return int(self.low_stock_threshold)
        return int(getattr(settings, "LOW_STOCK_DEFAULT_THRESHOLD", 10))

    @property
    def is_low_stock(self) -> bool:
        return int(self.stock_quantity or 0) <= self.effective_low_stock_threshold

    @property
    def is_under_review(self) -> bool:
        return self.status == self.STATUS_UNDER_REVIEW
