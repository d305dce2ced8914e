"""Order status state machine.

``VALID_TRANSITIONS`` (constants) answers *whether* a move is allowed;
``STATUS_EFFECTS`` says *what else changes* when the order enters a
state.  ``apply_transition`` is the only place ``order_status`` is
reassigned after creation.
"""

from __future__ import annotations

import secrets
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Dict, Optional

from django.utils import timezone

from modules.orders.constants import (
    IN_TRANSIT_COURIER,
    TRACKING_NUMBER_PREFIX,
    VALID_TRANSITIONS,
    OrderStatus,
)
from modules.orders.exceptions import InvalidOrderStatus

if TYPE_CHECKING:
    from modules.orders.models import Order

StatusEffect = Callable[["Order", datetime], None]


def generate_tracking_number() -> str:
    """Display identifier such as ``TRK-9F3A1C07``; not globally unique."""
    return f"{TRACKING_NUMBER_PREFIX}-{secrets.token_hex(4).upper()}"


def _mark_paid(order: Order, now: datetime) -> None:
    order.is_paid = True
    if order.paid_at is None:
        order.paid_at = now


def _clear_delivery(order: Order) -> None:
    order.is_delivered = False
    order.delivered_at = None


def _enter_processing(order: Order, now: datetime) -> None:
    _mark_paid(order, now)
    _clear_delivery(order)


def _enter_shipped(order: Order, now: datetime) -> None:
    _mark_paid(order, now)
    _clear_delivery(order)
    order.courier = IN_TRANSIT_COURIER
    order.tracking_number = generate_tracking_number()
    order.estimated_delivery = None


def _enter_delivered(order: Order, now: datetime) -> None:
    _mark_paid(order, now)
    order.is_delivered = True
    order.delivered_at = now


def _enter_cancelled(order: Order, now: datetime) -> None:
    _clear_delivery(order)
    order.cancelled_at = now


STATUS_EFFECTS: Dict[str, StatusEffect] = {
    OrderStatus.PROCESSING: _enter_processing,
    OrderStatus.SHIPPED: _enter_shipped,
    OrderStatus.DELIVERED: _enter_delivered,
    OrderStatus.CANCELLED: _enter_cancelled,
}


def can_transition(current: str, target: str) -> bool:
    return target in VALID_TRANSITIONS.get(current, set())


def apply_transition(order: Order, target: str, now: Optional[datetime] = None) -> str:
    """Move *order* to *target* and apply the side effects.

    Returns the previous status.  Mutates the instance only; persisting
    is the caller's job.

    Raises:
        InvalidOrderStatus: the transition is not in the table.
    """
    current = order.order_status
    if not can_transition(current, target):
        raise InvalidOrderStatus(f"Cannot transition from {current} to {target}.")

    STATUS_EFFECTS[target](order, now or timezone.now())
    order.order_status = target
    return current
