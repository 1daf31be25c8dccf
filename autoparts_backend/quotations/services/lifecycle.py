"""
QUOTATION / ORDER LIFECYCLE RULES

The only allowed status moves for Quotation and ActiveOrder.

DESIGN PRINCIPLES:
- No database writes
- No side effects
- Single source of truth
"""

from typing import Optional

from quotations.models import ActiveOrder, Quotation
from quotations.services.exceptions import (
    InvalidOrderTransitionError,
    InvalidQuotationTransitionError,
)

# ============================================================
# QUOTATIONS
# ============================================================

QUOTATION_TERMINAL_STATES = {
    Quotation.STATUS_ACCEPTED,
    Quotation.STATUS_DECLINED,
}

QUOTATION_TRANSITIONS = {
    Quotation.STATUS_PENDING: {
        Quotation.STATUS_ACCEPTED,
        Quotation.STATUS_DECLINED,
    },
}


def can_transition_quotation(*, from_status: str, to_status: str) -> bool:
    if from_status in QUOTATION_TERMINAL_STATES:
        return False
    return to_status in QUOTATION_TRANSITIONS.get(from_status, set())


def validate_quotation_transition(*, quotation: Quotation, target_status: str):
    if not can_transition_quotation(from_status=quotation.status, to_status=target_status):
        raise InvalidQuotationTransitionError(
            f"Quotation {quotation.quotation_number} cannot move from "
            f"'{quotation.status}' to '{target_status}'"
        )


# ============================================================
# ORDERS
# ============================================================

ORDER_SEQUENCE = ActiveOrder.STATUS_SEQUENCE

ORDER_TERMINAL_STATES = {
    ActiveOrder.STATUS_COMPLETED,
}


def order_rank(status: str) -> int:
    if status not in ORDER_SEQUENCE:
        raise InvalidOrderTransitionError(f"Unknown order status '{status}'")
    return ORDER_SEQUENCE.index(status)


def can_transition_order(*, from_status: str, to_status: str) -> bool:
    """Forward moves only; skipping ahead is allowed."""
    if from_status in ORDER_TERMINAL_STATES:
        return False
    return order_rank(to_status) > order_rank(from_status)


def next_order_status(status: str) -> Optional[str]:
    rank = order_rank(status)
    if rank + 1 >= len(ORDER_SEQUENCE):
        return None
    return ORDER_SEQUENCE[rank + 1]


def validate_order_transition(*, order: ActiveOrder, target_status: str):
    if not can_transition_order(from_status=order.status, to_status=target_status):
        raise InvalidOrderTransitionError(
            f"Order {order.order_number} cannot move from "
            f"'{order.status}' to '{target_status}'"
        )
