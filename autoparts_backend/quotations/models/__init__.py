from .order import ActiveOrder, OrderItem
from .quotation import Quotation, QuotationItem

__all__ = ["ActiveOrder", "OrderItem", "Quotation", "QuotationItem"]
