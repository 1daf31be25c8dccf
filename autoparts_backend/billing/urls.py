# billing/urls.py

"""
BILLING URLS (mounted under /api/billing/)

- preview/     totals + HSN summary for a draft (no save)
- bills/       list / create / retrieve / delete + payments / pdf / regenerate-pdf

Explicit routes go before the router.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from billing.views import BillPreviewView, BillViewSet

router = DefaultRouter()
router.register(r"bills", BillViewSet, basename="bills")

urlpatterns = [
    path("preview/", BillPreviewView.as_view(), name="billing-preview"),
    path("", include(router.urls)),
]
