# quotations/urls.py

"""
QUOTATION URLS (mounted under /api/quotations/)

- quotations/            list / create / retrieve + accept / decline / pdf
- orders/                list / retrieve + advance / status
- order-items/{id}/pick/ tick or untick a picked item
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from quotations.views import ActiveOrderViewSet, OrderItemPickView, QuotationViewSet

router = DefaultRouter()
router.register(r"quotations", QuotationViewSet, basename="quotations")
router.register(r"orders", ActiveOrderViewSet, basename="orders")

urlpatterns = [
    path("order-items/<uuid:item_id>/pick/", OrderItemPickView.as_view(), name="order-item-pick"),
    path("", include(router.urls)),
]
