from .quotation import (
    ActiveOrderSerializer,
    OrderItemSerializer,
    OrderStatusInputSerializer,
    PickInputSerializer,
    QuotationInputSerializer,
    QuotationItemInputSerializer,
    QuotationItemSerializer,
    QuotationListSerializer,
    QuotationSerializer,
)

__all__ = [
    "ActiveOrderSerializer",
    "OrderItemSerializer",
    "OrderStatusInputSerializer",
    "PickInputSerializer",
    "QuotationInputSerializer",
    "QuotationItemInputSerializer",
    "QuotationItemSerializer",
    "QuotationListSerializer",
    "QuotationSerializer",
]
