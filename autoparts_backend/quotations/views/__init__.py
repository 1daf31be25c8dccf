from .order import ActiveOrderViewSet, OrderItemPickView
from .quotation import QuotationViewSet

__all__ = ["ActiveOrderViewSet", "OrderItemPickView", "QuotationViewSet"]
