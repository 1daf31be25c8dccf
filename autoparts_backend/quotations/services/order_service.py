# quotations/services/order_service.py

"""
ACTIVE ORDER SERVICE

Warehouse side of an accepted quotation:
- tick / untick picked items
- move the order forward (picking -> ready -> dispatched -> completed)

RULES:
- Status never moves backwards
- transition_order() may skip ahead; advance_order() moves one step and
  refuses picking -> ready until every item is picked
- Picking is frozen once the order has left "picking"
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from permissions.context import OperatorContext
from permissions.roles import CAP_ORDERS_DISPATCH, CAP_ORDERS_PICK, CAP_QUOTATIONS_VIEW
from quotations.models import ActiveOrder, OrderItem
from quotations.services.exceptions import (
    InvalidOrderTransitionError,
    OrderNotFound,
    OrderNotReadyError,
)
from quotations.services.lifecycle import next_order_status, validate_order_transition

logger = logging.getLogger("quotations")

# Capability needed to move an order INTO a status.
_TRANSITION_CAPABILITIES = {
    ActiveOrder.STATUS_READY: CAP_ORDERS_PICK,
    ActiveOrder.STATUS_DISPATCHED: CAP_ORDERS_DISPATCH,
    ActiveOrder.STATUS_COMPLETED: CAP_ORDERS_DISPATCH,
}


@dataclass(frozen=True)
class PickingProgress:
    picked_count: int
    items_count: int

    @property
    def all_picked(self) -> bool:
        return self.items_count > 0 and self.picked_count == self.items_count

    def as_dict(self) -> dict:
        return {
            "picked_count": self.picked_count,
            "items_count": self.items_count,
            "all_picked": self.all_picked,
        }


def get_order(*, operator: OperatorContext, order_id, lock: bool = False) -> ActiveOrder:
    operator.require(CAP_QUOTATIONS_VIEW)
    qs = ActiveOrder.objects.select_for_update() if lock else ActiveOrder.objects.all()
    try:
        return qs.get(pk=order_id)
    except (ActiveOrder.DoesNotExist, ValidationError, ValueError) as exc:
        raise OrderNotFound("Order not found") from exc


def picking_progress(order: ActiveOrder) -> PickingProgress:
    items = order.items.all()
    return PickingProgress(
        picked_count=items.filter(is_picked=True).count(),
        items_count=items.count(),
    )


@transaction.atomic
def set_item_picked(*, operator: OperatorContext, item_id, picked: bool = True) -> OrderItem:
    operator.require(CAP_ORDERS_PICK)

    try:
        item = OrderItem.objects.select_for_update().select_related("order").get(pk=item_id)
    except (OrderItem.DoesNotExist, ValidationError, ValueError) as exc:
        raise OrderNotFound("Order item not found") from exc

    if item.order.status != ActiveOrder.STATUS_PICKING:
        raise InvalidOrderTransitionError(
            f"Order {item.order.order_number} is '{item.order.status}'; picking is closed"
        )

    if item.is_picked == picked:
        return item

    item.is_picked = picked
    item.picked_at = timezone.now() if picked else None
    item.picked_by = operator.user if picked else None
    item.save(update_fields=["is_picked", "picked_at", "picked_by"])

    logger.info(
        "Order item picked" if picked else "Order item unpicked",
        extra={
            "order_number": item.order.order_number,
            "item_id": str(item.pk),
            "operator": str(operator.user_id),
        },
    )
    return item


@transaction.atomic
def transition_order(*, operator: OperatorContext, order_id, target_status: str) -> ActiveOrder:
    """
    Move an order forward to target_status.

    Backward and same-state moves are refused. Forward skips
    (e.g. picking -> dispatched) are allowed.
    """
    capability = _TRANSITION_CAPABILITIES.get(target_status)
    if capability is None:
        raise InvalidOrderTransitionError(f"Cannot move an order to '{target_status}'")
    operator.require(capability)

    order = get_order(operator=operator, order_id=order_id, lock=True)
    validate_order_transition(order=order, target_status=target_status)

    previous = order.status
    order.status = target_status
    order.status_changed_at = timezone.now()
    order.save(update_fields=["status", "status_changed_at", "updated_at"])

    logger.info(
        "Order status changed",
        extra={
            "order_number": order.order_number,
            "from_status": previous,
            "to_status": target_status,
            "operator": str(operator.user_id),
        },
    )
    return order


@transaction.atomic
def advance_order(*, operator: OperatorContext, order_id) -> ActiveOrder:
    """One step forward. Picking -> ready waits for every item to be picked."""
    order = get_order(operator=operator, order_id=order_id, lock=True)

    target = next_order_status(order.status)
    if target is None:
        raise InvalidOrderTransitionError(f"Order {order.order_number} is already completed")

    if order.status == ActiveOrder.STATUS_PICKING:
        progress = picking_progress(order)
        if not progress.all_picked:
            raise OrderNotReadyError(
                f"Order {order.order_number} has "
                f"{progress.items_count - progress.picked_count} unpicked item(s)"
            )

    return transition_order(operator=operator, order_id=order.pk, target_status=target)
