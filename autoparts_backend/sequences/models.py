# sequences/models.py

"""
DOCUMENT SEQUENCES

One counter row per (kind, scope). Scope is the financial year for
invoices, orders and quotations, and the warehouse location for product
codes. The counter only moves forward; numbers burned by a failed save
are never reissued, so gaps are expected.
"""

from django.db import models


class DocumentSequence(models.Model):
    KIND_BILL = "bill"
    KIND_ORDER = "order"
    KIND_QUOTATION = "quotation"
    KIND_PRODUCT = "product"

    KIND_CHOICES = [
        (KIND_BILL, "Bill"),
        (KIND_ORDER, "Order"),
        (KIND_QUOTATION, "Quotation"),
        (KIND_PRODUCT, "Product Code"),
    ]

    kind = models.CharField(max_length=20, choices=KIND_CHOICES)
    scope = models.CharField(max_length=16)
    last_value = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["kind", "-scope"]
        constraints = [
            models.UniqueConstraint(
                fields=["kind", "scope"],
                name="uniq_document_sequence_kind_scope",
            ),
        ]

    def __str__(self):
        return f"{self.kind} {self.scope} @ {self.last_value}"
