from .bill import BillViewSet
from .preview import BillPreviewView

__all__ = ["BillViewSet", "BillPreviewView"]
