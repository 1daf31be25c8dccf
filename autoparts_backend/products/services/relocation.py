# products/services/relocation.py

"""
BULK LOCATION UPDATE

Moves many products to one warehouse location in a single request.

Rules:
- Target must be a known location
- Products already at the target are skipped (no history row)
- Each moved product gets exactly one ProductLocationHistory row
- Unknown ids are reported back, not raised
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from django.core.exceptions import ValidationError

from permissions.context import OperatorContext
from permissions.roles import CAP_INVENTORY_RELOCATE
from products.models import Product, ProductLocationHistory
from products.services.exceptions import InvalidRelocation

logger = logging.getLogger("inventory")

BULK_LOCATION_NOTE = "Bulk location update"


@dataclass
class BulkRelocationResult:
    moved: list = field(default_factory=list)
    skipped: list = field(default_factory=list)
    missing: list = field(default_factory=list)


def bulk_relocate(
    *,
    operator: OperatorContext,
    product_ids,
    new_location: str,
    notes: str = "",
) -> BulkRelocationResult:
    operator.require(CAP_INVENTORY_RELOCATE)

    target = (new_location or "").strip().upper()
    if target not in Product.LOCATIONS:
        raise InvalidRelocation(f"Unknown location '{new_location}'")

    ids = [str(pid) for pid in (product_ids or [])]
    if not ids:
        raise InvalidRelocation("Select at least one product")

    try:
        found = {str(p.pk): p for p in Product.objects.filter(pk__in=ids)}
    except ValidationError as exc:
        raise InvalidRelocation("product_ids must be valid product ids") from exc

    result = BulkRelocationResult()
    note = notes or BULK_LOCATION_NOTE

    for pid in dict.fromkeys(ids):
        product = found.get(pid)
        if product is None:
            result.missing.append(pid)
            continue

        if product.location == target:
            result.skipped.append(product)
            continue

        old_location = product.location
        product.location = target
        product.revision = int(product.revision or 0) + 1
        product.save(update_fields=["location", "revision", "updated_at"])

        ProductLocationHistory.objects.create(
            product=product,
            old_location=old_location,
            new_location=target,
            changed_by=operator.user,
            notes=note,
        )
        result.moved.append(product)

    logger.info(
        "Bulk relocation",
        extra={
            "new_location": target,
            "moved": len(result.moved),
            "skipped": len(result.skipped),
            "missing": len(result.missing),
            "operator": str(operator.user_id),
        },
    )
    return result


def location_history_for(product: Product):
    return (
        ProductLocationHistory.objects.filter(product=product)
        .select_related("changed_by")
        .order_by("-changed_at")
    )
