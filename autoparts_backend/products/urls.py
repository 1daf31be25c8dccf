# products/urls.py

"""
PRODUCTS URLS (mounted under /api/products/)

- categories/
- products/            CRUD + label / scan-history / location-history /
                       low-stock / restock / bulk-relocate / analytics
- scan/                QR scanner commands
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from products.views import CategoryViewSet, ProductViewSet, ScanViewSet

router = DefaultRouter()

router.register(r"categories", CategoryViewSet, basename="categories")
router.register(r"products", ProductViewSet, basename="products")
router.register(r"scan", ScanViewSet, basename="scan")

urlpatterns = [
    path("", include(router.urls)),
]
