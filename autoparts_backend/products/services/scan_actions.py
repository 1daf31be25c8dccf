# products/services/scan_actions.py

"""
STOCK / LOCATION MUTATION RECORDER

Every scanner action runs the same four steps:
  1. re-fetch the live product (never trust the label snapshot)
  2. compute the new value(s)
  3. persist the product
  4. append the audit record(s)

Rules:
- No transaction wraps steps 3 and 4. If step 4 fails the product update
  stays applied and StockMutationError(product_applied=True) is raised.
- No row locks. Two operators acting on one product race and the later
  write wins; revision increments on every write so the overwrite is visible.
- Sales clamp at zero: new = max(0, old - qty). The audit keeps the
  requested change, not the clamped one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import DatabaseError

from permissions.context import OperatorContext
from permissions.roles import (
    CAP_INVENTORY_ADJUST,
    CAP_INVENTORY_FLAG,
    CAP_INVENTORY_RELOCATE,
    CAP_INVENTORY_SCAN,
)
from products.models import Product, ProductLocationHistory, ScanHistory
from products.services.exceptions import (
    InvalidRelocation,
    InvalidStockChange,
    ProductNotFound,
    StockMutationError,
)

logger = logging.getLogger("inventory")

SCANNER_LOCATION_NOTE = "Updated via QR scanner"

# stock_quantity is a PositiveIntegerField; quantity_change an IntegerField.
MAX_STOCK = 2147483647


@dataclass(frozen=True)
class MutationResult:
    product: Product
    record: ScanHistory
    location_record: Optional[ProductLocationHistory] = None


# ------------------------------------------------------------------
# input guards
# ------------------------------------------------------------------
def _to_int(value, *, field_name: str) -> int:
    if value is None or value == "":
        raise InvalidStockChange(f"{field_name} is required")
    if isinstance(value, bool):
        raise InvalidStockChange(f"{field_name} must be an integer")
    if isinstance(value, float) and not value.is_integer():
        raise InvalidStockChange(f"{field_name} must be a whole number")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidStockChange(f"{field_name} must be an integer")


def _to_positive_qty(value) -> int:
    qty = _to_int(value, field_name="quantity")
    if qty <= 0:
        raise InvalidStockChange("quantity must be greater than zero")
    if qty > MAX_STOCK:
        raise InvalidStockChange(f"quantity must not exceed {MAX_STOCK}")
    return qty


def _to_delta(value) -> int:
    delta = _to_int(value, field_name="quantity_change")
    if delta == 0:
        raise InvalidStockChange("quantity_change cannot be 0")
    if abs(delta) > MAX_STOCK:
        raise InvalidStockChange(f"quantity_change must be within {MAX_STOCK}")
    return delta


# ------------------------------------------------------------------
# steps
# ------------------------------------------------------------------
def fetch_product(product_id) -> Product:
    try:
        return Product.objects.get(pk=product_id)
    except (Product.DoesNotExist, ValidationError, ValueError):
        raise ProductNotFound(f"Product {product_id} not found")


def _persist(product: Product, fields: list[str]) -> None:
    product.revision = int(product.revision or 0) + 1
    try:
        product.save(update_fields=[*fields, "revision", "updated_at"])
    except DatabaseError as exc:
        logger.error(
            "Product update failed",
            extra={"product_id": str(product.pk), "fields": fields},
        )
        raise StockMutationError("Failed to update product", product_applied=False) from exc


def _append(model, **fields):
    try:
        return model.objects.create(**fields)
    except (DatabaseError, ValidationError) as exc:
        logger.error(
            "Audit append failed after product update",
            extra={"product_id": str(fields.get("product").pk), "model": model.__name__},
        )
        raise StockMutationError(
            "Product was updated but its audit record could not be written",
            product_applied=True,
        ) from exc


def _apply_stock_change(
    *,
    operator: OperatorContext,
    product_id,
    quantity_change: int,
    notes: str = "",
) -> MutationResult:
    product = fetch_product(product_id)

    old_stock = int(product.stock_quantity or 0)
    new_stock = max(0, old_stock + quantity_change)
    if new_stock > MAX_STOCK:
        raise InvalidStockChange(f"Stock would exceed {MAX_STOCK}")
    action = ScanHistory.ACTION_STOCK_UP if quantity_change > 0 else ScanHistory.ACTION_SOLD

    product.stock_quantity = new_stock
    _persist(product, ["stock_quantity"])

    record = _append(
        ScanHistory,
        product=product,
        action=action,
        quantity_change=quantity_change,
        old_stock=old_stock,
        new_stock=new_stock,
        notes=notes or "",
        performed_by=operator.user,
    )

    logger.info(
        "Stock changed",
        extra={
            "product_id": str(product.pk),
            "action": action,
            "old_stock": old_stock,
            "new_stock": new_stock,
            "quantity_change": quantity_change,
            "operator": str(operator.user_id),
        },
    )
    return MutationResult(product=product, record=record)


# ------------------------------------------------------------------
# operations
# ------------------------------------------------------------------
def record_view(*, operator: OperatorContext, product_id, notes: str = "") -> MutationResult:
    operator.require(CAP_INVENTORY_SCAN)
    product = fetch_product(product_id)
    record = _append(
        ScanHistory,
        product=product,
        action=ScanHistory.ACTION_VIEW,
        notes=notes or "",
        performed_by=operator.user,
    )
    return MutationResult(product=product, record=record)


def sell(*, operator: OperatorContext, product_id, quantity, notes: str = "") -> MutationResult:
    operator.require(CAP_INVENTORY_SCAN)
    qty = _to_positive_qty(quantity)
    return _apply_stock_change(
        operator=operator, product_id=product_id, quantity_change=-qty, notes=notes
    )


def stock_up(*, operator: OperatorContext, product_id, quantity, notes: str = "") -> MutationResult:
    operator.require(CAP_INVENTORY_ADJUST)
    qty = _to_positive_qty(quantity)
    return _apply_stock_change(
        operator=operator, product_id=product_id, quantity_change=qty, notes=notes
    )


def custom_adjust(
    *, operator: OperatorContext, product_id, quantity_change, notes: str = ""
) -> MutationResult:
    """Signed correction; positive is recorded as stock_up, negative as sold."""
    operator.require(CAP_INVENTORY_ADJUST)
    delta = _to_delta(quantity_change)
    return _apply_stock_change(
        operator=operator, product_id=product_id, quantity_change=delta, notes=notes
    )


def relocate(
    *, operator: OperatorContext, product_id, new_location, notes: str = ""
) -> MutationResult:
    operator.require(CAP_INVENTORY_RELOCATE)

    target = (new_location or "").strip().upper()
    if target not in Product.LOCATIONS:
        raise InvalidRelocation(f"Unknown location '{new_location}'")

    product = fetch_product(product_id)
    old_location = product.location

    if old_location == target:
        raise InvalidRelocation(f"Product is already at {target}")

    product.location = target
    _persist(product, ["location"])

    note = notes or SCANNER_LOCATION_NOTE

    record = _append(
        ScanHistory,
        product=product,
        action=ScanHistory.ACTION_LOCATION_CHANGE,
        old_location=old_location,
        new_location=target,
        notes=note,
        performed_by=operator.user,
    )
    location_record = _append(
        ProductLocationHistory,
        product=product,
        old_location=old_location,
        new_location=target,
        changed_by=operator.user,
        notes=note,
    )

    logger.info(
        "Product relocated",
        extra={
            "product_id": str(product.pk),
            "old_location": old_location,
            "new_location": target,
            "operator": str(operator.user_id),
        },
    )
    return MutationResult(product=product, record=record, location_record=location_record)


def flag_for_review(*, operator: OperatorContext, product_id, note: str = "") -> MutationResult:
    operator.require(CAP_INVENTORY_FLAG)
    product = fetch_product(product_id)

    product.status = Product.STATUS_UNDER_REVIEW
    product.review_note = (note or "").strip()
    _persist(product, ["status", "review_note"])

    record = _append(
        ScanHistory,
        product=product,
        action=ScanHistory.ACTION_FLAG,
        notes=product.review_note,
        performed_by=operator.user,
    )
    return MutationResult(product=product, record=record)


def clear_review_flag(*, operator: OperatorContext, product_id, notes: str = "") -> MutationResult:
    operator.require(CAP_INVENTORY_FLAG)
    product = fetch_product(product_id)

    product.status = Product.STATUS_ACTIVE
    product.review_note = ""
    _persist(product, ["status", "review_note"])

    record = _append(
        ScanHistory,
        product=product,
        action=ScanHistory.ACTION_UNFLAG,
        notes=notes or "",
        performed_by=operator.user,
    )
    return MutationResult(product=product, record=record)
