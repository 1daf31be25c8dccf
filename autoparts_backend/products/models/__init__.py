"""
PATH: products/models/__init__.py

Products models export surface.
"""

from .category import Category
from .product import Product
from .scan_history import ScanHistory
from .location_history import ProductLocationHistory

__all__ = [
    "Category",
    "Product",
    "ScanHistory",
    "ProductLocationHistory",
]
