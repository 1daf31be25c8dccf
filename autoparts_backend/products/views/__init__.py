# products/views/__init__.py

from .category import CategoryViewSet
from .product import ProductViewSet
from .scan import ScanViewSet

__all__ = [
    "CategoryViewSet",
    "ProductViewSet",
    "ScanViewSet",
]
