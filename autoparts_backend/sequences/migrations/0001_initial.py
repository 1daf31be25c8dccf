"""
======================================================
PATH: sequences/migrations/0001_initial.py
======================================================
MIGRATION: CREATE DocumentSequence
"""

from __future__ import annotations

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="DocumentSequence",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("bill", "Bill"),
                            ("order", "Order"),
                            ("quotation", "Quotation"),
                            ("product", "Product Code"),
                        ],
                        max_length=20,
                    ),
                ),
                ("scope", models.CharField(max_length=16)),
                ("last_value", models.PositiveIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["kind", "-scope"],
            },
        ),
        migrations.AddConstraint(
            model_name="documentsequence",
            constraint=models.UniqueConstraint(
                fields=("kind", "scope"),
                name="uniq_document_sequence_kind_scope",
            ),
        ),
    ]
