# products/serializers/__init__.py

from .category import CategorySerializer
from .history import ProductLocationHistorySerializer, ScanHistorySerializer
from .product import ProductSerializer

__all__ = [
    "CategorySerializer",
    "ProductLocationHistorySerializer",
    "ProductSerializer",
    "ScanHistorySerializer",
]
