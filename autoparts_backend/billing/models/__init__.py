from .bill import Bill
from .bill_item import BillItem
from .bill_payment import BillPayment

__all__ = ["Bill", "BillItem", "BillPayment"]
