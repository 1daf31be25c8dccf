"""
======================================================
PATH: products/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Category, Product, ScanHistory, ProductLocationHistory
"""

from __future__ import annotations

import uuid

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion

import products.models.product


LOCATION_CHOICES = [
    ("RA1", "Warehouse 1"),
    ("RA2", "Warehouse 2"),
    ("RA3", "Warehouse 3"),
    ("RA4", "Warehouse 4"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Category",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(max_length=120, unique=True)),
                ("slug", models.SlugField(blank=True, max_length=140, unique=True)),
                ("description", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "verbose_name_plural": "categories",
            },
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("product_code", models.CharField(max_length=32, unique=True)),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("slug", models.SlugField(blank=True, max_length=280, unique=True)),
                (
                    "sku",
                    models.CharField(blank=True, db_index=True, default="", max_length=128),
                ),
                (
                    "short_description",
                    models.CharField(blank=True, default="", max_length=500),
                ),
                ("description", models.TextField(blank=True, default="")),
                (
                    "price",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True),
                ),
                ("stock_quantity", models.PositiveIntegerField(default=0)),
                ("low_stock_threshold", models.PositiveIntegerField(blank=True, null=True)),
                (
                    "location",
                    models.CharField(
                        blank=True,
                        choices=LOCATION_CHOICES,
                        db_index=True,
                        max_length=4,
                        null=True,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("under_review", "Under Review")],
                        db_index=True,
                        default="active",
                        max_length=20,
                    ),
                ),
                ("review_note", models.TextField(blank=True, default="")),
                ("published", models.BooleanField(default=False)),
                ("tags", models.JSONField(blank=True, default=list)),
                (
                    "images",
                    models.JSONField(blank=True, default=products.models.product.default_images),
                ),
                ("revision", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "category",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="products",
                        to="products.category",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="products_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="ScanHistory",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("view", "Viewed"),
                            ("sold", "Sold"),
                            ("stock_up", "Stocked Up"),
                            ("location_change", "Location Changed"),
                            ("flag", "Flagged for Review"),
                            ("unflag", "Review Cleared"),
                        ],
                        db_index=True,
                        max_length=20,
                    ),
                ),
                ("quantity_change", models.IntegerField(blank=True, null=True)),
                ("old_stock", models.PositiveIntegerField(blank=True, null=True)),
                ("new_stock", models.PositiveIntegerField(blank=True, null=True)),
                (
                    "old_location",
                    models.CharField(blank=True, choices=LOCATION_CHOICES, max_length=4, null=True),
                ),
                (
                    "new_location",
                    models.CharField(blank=True, choices=LOCATION_CHOICES, max_length=4, null=True),
                ),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                (
                    "performed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="scan_records",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="scan_history",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "verbose_name_plural": "scan history",
            },
        ),
        migrations.CreateModel(
            name="ProductLocationHistory",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "old_location",
                    models.CharField(blank=True, choices=LOCATION_CHOICES, max_length=4, null=True),
                ),
                ("new_location", models.CharField(choices=LOCATION_CHOICES, max_length=4)),
                ("notes", models.TextField(blank=True, default="")),
                ("changed_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                (
                    "changed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="location_changes",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="location_history",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "ordering": ["-changed_at"],
                "verbose_name_plural": "product location history",
            },
        ),
    ]
