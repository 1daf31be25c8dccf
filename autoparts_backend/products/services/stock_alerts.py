# products/services/stock_alerts.py

"""
LOW STOCK ALERTS

A product is low when stock_quantity <= its threshold (settings default
when the product has none). Levels:
- out_of_stock : stock == 0
- critical     : stock <= threshold / 2
- low          : anything else at or under the threshold
"""

from __future__ import annotations

from django.conf import settings
from django.db.models import F, Q, Value
from django.db.models.functions import Coalesce

from permissions.context import OperatorContext
from permissions.roles import CAP_INVENTORY_VIEW
from products.models import Product
from products.services.scan_actions import stock_up

LEVEL_OUT_OF_STOCK = "out_of_stock"
LEVEL_CRITICAL = "critical"
LEVEL_LOW = "low"
LEVEL_OK = "ok"

RESTOCK_NOTE = "Restocked via Low Stock Alerts page"


def default_threshold() -> int:
    return int(getattr(settings, "LOW_STOCK_DEFAULT_THRESHOLD", 10))


def stock_level(product: Product) -> str:
    stock = int(product.stock_quantity or 0)
    threshold = product.effective_low_stock_threshold

    if stock == 0:
        return LEVEL_OUT_OF_STOCK
    if stock > threshold:
        return LEVEL_OK
    if stock <= threshold / 2:
        return LEVEL_CRITICAL
    return LEVEL_LOW


def low_stock_queryset():
    return (
        Product.objects.annotate(
            _threshold=Coalesce(F("low_stock_threshold"), Value(default_threshold()))
        )
        .filter(Q(stock_quantity__lte=F("_threshold")))
        .order_by("stock_quantity", "name")
    )


def list_low_stock_products(*, operator: OperatorContext) -> list[Product]:
    operator.require(CAP_INVENTORY_VIEW)
    return list(low_stock_queryset())


def restock_low_stock(*, operator: OperatorContext, product_id, quantity):
    return stock_up(
        operator=operator,
        product_id=product_id,
        quantity=quantity,
        notes=RESTOCK_NOTE,
    )
