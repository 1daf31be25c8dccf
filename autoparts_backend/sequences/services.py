# sequences/services.py

"""
DOCUMENT NUMBER GENERATORS

generate_bill_number() / generate_order_number() / generate_quotation_number()
each mint a fresh, unique string per call:

    <PREFIX>/<FY>/<00001>     e.g. INV/2025-26/00042

FY is the Indian financial year (April to March).

generate_product_code(location) mints warehouse-scoped product codes:

    RA2-00017   (no location: PRD-00017)

Rules:
- The counter row is locked (select_for_update) while it is incremented
- Callers treat the result as opaque
- Any database failure surfaces as NumberingError (nothing else persisted)
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from sequences.models import DocumentSequence

logger = logging.getLogger("sequences")

UNSCOPED_PRODUCT_PREFIX = "PRD"


class NumberingError(Exception):
    """Document number could not be minted. Safe to retry."""


def financial_year_label(day: date) -> str:
    start = day.year if day.month >= 4 else day.year - 1
    return f"{start}-{str(start + 1)[-2:]}"


def _prefix_for(kind: str) -> str:
    prefixes = getattr(settings, "SEQUENCE_PREFIXES", {}) or {}
    return prefixes.get(kind) or kind.upper()


def _next_value(*, kind: str, scope: str) -> int:
    try:
        with transaction.atomic():
            seq, _ = DocumentSequence.objects.select_for_update().get_or_create(
                kind=kind,
                scope=scope,
            )
            seq.last_value += 1
            seq.save(update_fields=["last_value", "updated_at"])
            return seq.last_value
    except DatabaseError as exc:
        logger.error(
            "Document number generation failed",
            extra={"kind": kind, "scope": scope},
        )
        raise NumberingError(f"Could not generate a {kind} number. Please try again.") from exc


def generate_document_number(kind: str, *, today: Optional[date] = None) -> str:
    if kind not in (
        DocumentSequence.KIND_BILL,
        DocumentSequence.KIND_ORDER,
        DocumentSequence.KIND_QUOTATION,
    ):
        raise NumberingError(f"Unknown document kind '{kind}'")

    fy = financial_year_label(today or timezone.localdate())
    value = _next_value(kind=kind, scope=fy)

    number = f"{_prefix_for(kind)}/{fy}/{value:05d}"
    logger.info("Document number issued", extra={"kind": kind, "number": number})
    return number


def generate_bill_number() -> str:
    return generate_document_number(DocumentSequence.KIND_BILL)


def generate_order_number() -> str:
    return generate_document_number(DocumentSequence.KIND_ORDER)


def generate_quotation_number() -> str:
    return generate_document_number(DocumentSequence.KIND_QUOTATION)


def generate_product_code(location: Optional[str] = None) -> str:
    scope = (location or "").strip().upper() or UNSCOPED_PRODUCT_PREFIX
    value = _next_value(kind=DocumentSequence.KIND_PRODUCT, scope=scope)
    return f"{scope}-{value:05d}"
