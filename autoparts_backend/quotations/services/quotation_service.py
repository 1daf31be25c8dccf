# quotations/services/quotation_service.py

"""
QUOTATION SERVICE

create_quotation()   pending quotation + items (blank rows dropped)
accept_quotation()   pending -> accepted, spawns exactly one ActiveOrder
decline_quotation()  pending -> declined
quotation_document() printable PDF (rendered on demand, not stored)

accept/decline lock the quotation row so a double submit cannot spawn two
orders or flip a decided quotation.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from billing.services.documents import build_quotation_document, render_quotation_pdf
from permissions.context import OperatorContext
from permissions.roles import CAP_QUOTATIONS_MANAGE, CAP_QUOTATIONS_VIEW
from products.models import Product
from quotations.models import ActiveOrder, OrderItem, Quotation, QuotationItem
from quotations.services.exceptions import (
    QuotationNotFound,
    QuotationNumberingError,
    QuotationValidationError,
)
from quotations.services.lifecycle import validate_quotation_transition
from sequences.services import NumberingError, generate_order_number, generate_quotation_number

logger = logging.getLogger("quotations")

MONEY = Decimal("0.01")


def _decimal(value):
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        return None
    return result if result.is_finite() else None


def clean_items(raw_items) -> list[dict]:
    """
    Keep rows that have a description and a positive rate.

    Rows failing that are treated as unused form rows and dropped; a kept row
    with a non-positive quantity is an error.
    """
    kept = []
    errors = {}

    for index, raw in enumerate(raw_items or []):
        raw = raw or {}
        description = str(raw.get("description") or "").strip()
        rate = _decimal(raw.get("rate"))
        if not description or rate is None or rate <= 0:
            continue

        raw_quantity = raw.get("quantity")
        quantity = _decimal(1 if raw_quantity in (None, "") else raw_quantity)
        if quantity is None or quantity <= 0:
            errors[f"items[{index}].quantity"] = "Quantity must be greater than zero"
            continue

        quantity = quantity.quantize(MONEY, rounding=ROUND_HALF_UP)
        rate = rate.quantize(MONEY, rounding=ROUND_HALF_UP)
        product = raw.get("product") or raw.get("product_id")
        kept.append(
            {
                "description": description,
                "quantity": quantity,
                "rate": rate,
                "total_amount": (quantity * rate).quantize(MONEY, rounding=ROUND_HALF_UP),
                "product_id": str(getattr(product, "pk", product)) if product else None,
            }
        )

    if errors:
        raise QuotationValidationError(errors)
    return kept


def _mint(generator) -> str:
    try:
        return generator()
    except NumberingError as exc:
        raise QuotationNumberingError(str(exc)) from exc


def get_quotation(*, operator: OperatorContext, quotation_id, lock: bool = False) -> Quotation:
    operator.require(CAP_QUOTATIONS_VIEW)
    qs = Quotation.objects.select_for_update() if lock else Quotation.objects.all()
    try:
        return qs.get(pk=quotation_id)
    except (Quotation.DoesNotExist, ValidationError, ValueError) as exc:
        raise QuotationNotFound("Quotation not found") from exc


@transaction.atomic
def create_quotation(*, operator: OperatorContext, data: dict) -> Quotation:
    operator.require(CAP_QUOTATIONS_MANAGE)

    errors = {}
    party_name = str(data.get("party_name") or "").strip()
    if not party_name:
        errors["party_name"] = "Party name is required"

    items = clean_items(data.get("items"))
    if not items:
        errors["items"] = "Add at least one item with a description and rate"

    if errors:
        raise QuotationValidationError(errors)

    wanted = {i["product_id"] for i in items if i["product_id"]}
    if wanted:
        found = {str(pk) for pk in Product.objects.filter(pk__in=wanted).values_list("pk", flat=True)}
        missing = wanted - found
        if missing:
            raise QuotationValidationError({"items": f"Unknown product(s): {', '.join(sorted(missing))}"})

    subtotal = sum((i["total_amount"] for i in items), Decimal("0.00"))

    quotation = Quotation.objects.create(
        quotation_number=_mint(generate_quotation_number),
        party_name=party_name,
        party_address=str(data.get("party_address") or "").strip(),
        vehicle_number=str(data.get("vehicle_number") or "").strip().upper(),
        comments=str(data.get("comments") or "").strip(),
        subtotal=subtotal,
        total_amount=subtotal,
        created_by=operator.user,
    )

    QuotationItem.objects.bulk_create(
        [
            QuotationItem(
                quotation=quotation,
                position=position,
                product_id=item["product_id"],
                description=item["description"],
                quantity=item["quantity"],
                rate=item["rate"],
                total_amount=item["total_amount"],
            )
            for position, item in enumerate(items)
        ]
    )

    logger.info(
        "Quotation created",
        extra={
            "quotation_number": quotation.quotation_number,
            "items": len(items),
            "total_amount": str(quotation.total_amount),
            "operator": str(operator.user_id),
        },
    )
    return quotation


@transaction.atomic
def accept_quotation(*, operator: OperatorContext, quotation_id) -> ActiveOrder:
    operator.require(CAP_QUOTATIONS_MANAGE)

    quotation = get_quotation(operator=operator, quotation_id=quotation_id, lock=True)
    validate_quotation_transition(quotation=quotation, target_status=Quotation.STATUS_ACCEPTED)

    quotation.status = Quotation.STATUS_ACCEPTED
    quotation.decided_by = operator.user
    quotation.decided_at = timezone.now()
    quotation.save(update_fields=["status", "decided_by", "decided_at", "updated_at"])

    order = ActiveOrder.objects.create(
        order_number=_mint(generate_order_number),
        quotation=quotation,
        status=ActiveOrder.STATUS_PICKING,
        status_changed_at=timezone.now(),
        created_by=operator.user,
    )

    OrderItem.objects.bulk_create(
        [
            OrderItem(
                order=order,
                quotation_item=item,
                description=item.description,
                quantity=item.quantity,
            )
            for item in quotation.items.all()
        ]
    )

    logger.info(
        "Quotation accepted",
        extra={
            "quotation_number": quotation.quotation_number,
            "order_number": order.order_number,
            "operator": str(operator.user_id),
        },
    )
    return order


@transaction.atomic
def decline_quotation(*, operator: OperatorContext, quotation_id) -> Quotation:
    operator.require(CAP_QUOTATIONS_MANAGE)

    quotation = get_quotation(operator=operator, quotation_id=quotation_id, lock=True)
    validate_quotation_transition(quotation=quotation, target_status=Quotation.STATUS_DECLINED)

    quotation.status = Quotation.STATUS_DECLINED
    quotation.decided_by = operator.user
    quotation.decided_at = timezone.now()
    quotation.save(update_fields=["status", "decided_by", "decided_at", "updated_at"])

    logger.info(
        "Quotation declined",
        extra={"quotation_number": quotation.quotation_number, "operator": str(operator.user_id)},
    )
    return quotation


def quotation_document(*, operator: OperatorContext, quotation_id) -> tuple[str, bytes]:
    quotation = get_quotation(operator=operator, quotation_id=quotation_id)
    pdf = render_quotation_pdf(build_quotation_document(quotation))
    return f"{quotation.quotation_number.replace('/', '-')}.pdf", pdf
