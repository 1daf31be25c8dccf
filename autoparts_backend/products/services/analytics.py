# products/services/analytics.py

"""
INVENTORY ANALYTICS

Read-only dashboard numbers:
- per-location product count + units ("Unassigned" for products with no location)
- stock status split: in stock / low stock / out of stock
- totals (products, units, low, out, under review)
- the 10 most recent location moves
"""

from __future__ import annotations

from django.db.models import Count, F, Sum, Value
from django.db.models.functions import Coalesce

from permissions.context import OperatorContext
from permissions.roles import CAP_REPORTS_VIEW_INVENTORY
from products.models import Product, ProductLocationHistory
from products.services.stock_alerts import default_threshold

UNASSIGNED_LOCATION = "Unassigned"
RECENT_MOVES_LIMIT = 10


def location_breakdown() -> list[dict]:
    rows = (
        Product.objects.values("location")
        .annotate(count=Count("id"), total_stock=Coalesce(Sum("stock_quantity"), 0))
        .order_by("location")
    )
    return [
        {
            "location": row["location"] or UNASSIGNED_LOCATION,
            "count": row["count"],
            "total_stock": int(row["total_stock"] or 0),
        }
        for row in rows
    ]


def recent_location_moves(limit: int = RECENT_MOVES_LIMIT) -> list[dict]:
    moves = ProductLocationHistory.objects.select_related("product").order_by("-changed_at")[:limit]
    return [
        {
            "id": str(m.id),
            "product_id": str(m.product_id),
            "product_name": m.product.name,
            "old_location": m.old_location,
            "new_location": m.new_location,
            "changed_at": m.changed_at,
        }
        for m in moves
    ]


def inventory_overview(*, operator: OperatorContext) -> dict:
    operator.require(CAP_REPORTS_VIEW_INVENTORY)

    qs = Product.objects.annotate(
        _threshold=Coalesce(F("low_stock_threshold"), Value(default_threshold()))
    )

    total_products = qs.count()
    total_stock = qs.aggregate(total=Coalesce(Sum("stock_quantity"), 0))["total"] or 0
    out_of_stock = qs.filter(stock_quantity=0).count()
    low_stock = qs.filter(stock_quantity__gt=0, stock_quantity__lte=F("_threshold")).count()
    under_review = qs.filter(status=Product.STATUS_UNDER_REVIEW).count()

    return {
        "locations": location_breakdown(),
        "stock_status": [
            {"status": "in_stock", "count": total_products - low_stock - out_of_stock},
            {"status": "low_stock", "count": low_stock},
            {"status": "out_of_stock", "count": out_of_stock},
        ],
        "totals": {
            "total_products": total_products,
            "total_stock": int(total_stock),
            "low_stock_items": low_stock,
            "out_of_stock": out_of_stock,
            "under_review": under_review,
        },
        "recent_moves": recent_location_moves(),
    }
