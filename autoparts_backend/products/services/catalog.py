# products/services/catalog.py

"""
PRODUCT CATALOG WRITES

create_product assigns a warehouse-scoped product code
(generate_product_code) and records who created the product.
Stock and location changes after creation go through scan_actions /
relocation so they are audited.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from permissions.context import OperatorContext
from permissions.roles import CAP_INVENTORY_EDIT
from products.models import Product
from products.services.media import normalize_images
from products.services.exceptions import ProductCodeError
from sequences.services import NumberingError, generate_product_code

logger = logging.getLogger("inventory")

# Fields that may only change through audited operations.
AUDITED_FIELDS = {"stock_quantity", "location", "status", "review_note"}


@transaction.atomic
def create_product(*, operator: OperatorContext, data: dict) -> Product:
    operator.require(CAP_INVENTORY_EDIT)

    payload = dict(data)
    location = payload.get("location") or None
    if location and location not in Product.LOCATIONS:
        raise ValidationError({"location": f"Unknown location '{location}'"})

    payload["images"] = normalize_images(payload.get("images"))

    try:
        product_code = generate_product_code(location)
    except NumberingError as exc:
        raise ProductCodeError(str(exc)) from exc

    product = Product(
        **payload,
        product_code=product_code,
        created_by=operator.user,
    )
    product.full_clean()
    product.save()

    logger.info(
        "Product created",
        extra={"product_id": str(product.pk), "product_code": product.product_code},
    )
    return product


def update_product(*, operator: OperatorContext, product: Product, data: dict) -> Product:
    operator.require(CAP_INVENTORY_EDIT)

    blocked = AUDITED_FIELDS.intersection(data)
    if blocked:
        raise ValidationError(
            {field: "Use the scanner / relocation endpoints to change this field." for field in blocked}
        )

    for field, value in data.items():
        if field == "images":
            value = normalize_images(value)
        setattr(product, field, value)

    product.full_clean()
    product.save()
    return product
