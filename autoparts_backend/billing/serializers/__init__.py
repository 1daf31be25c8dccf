from .bill import (
    BillInputSerializer,
    BillItemSerializer,
    BillLineInputSerializer,
    BillListSerializer,
    BillPaymentSerializer,
    BillSerializer,
    PaymentInputSerializer,
)

__all__ = [
    "BillInputSerializer",
    "BillItemSerializer",
    "BillLineInputSerializer",
    "BillListSerializer",
    "BillPaymentSerializer",
    "BillSerializer",
    "PaymentInputSerializer",
]
