"""Event handlers for Orders domain events.

Handlers run after commit and only notify the customer; a failure here is
logged by the bus and never affects the order.
"""

from __future__ import annotations

from typing import Optional

import structlog

from modules.notifications.services import NotificationService
from modules.orders.constants import OrderStatus
from modules.orders.events import (
    OrderCancelled,
    OrderCreated,
    OrderPaid,
    OrderStatusChanged,
)
from modules.payments.dtos import from_minor_units
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)

RECEIPT_TEMPLATE = """\
<h2>Thank you for your order!</h2>
<p>We have received your payment of {currency} {amount:,.2f}.</p>
<p>Order reference: <strong>{reference}</strong></p>
<p>We'll let you know as soon as it ships.</p>
"""

SHIPPED_TEMPLATE = """\
<h2>Your order is on its way</h2>
<p>Order <strong>{order_id}</strong> has been shipped.</p>
<p>Tracking number: <strong>{tracking_number}</strong></p>
"""

DELIVERED_TEMPLATE = """\
<h2>Your order has been delivered</h2>
<p>Order <strong>{order_id}</strong> was delivered. Enjoy!</p>
"""

CANCELLED_TEMPLATE = """\
<h2>Your order was cancelled</h2>
<p>Order <strong>{order_id}</strong> has been cancelled.</p>
"""


class _NotifyingHandler:
    def __init__(self, notifications: Optional[NotificationService] = None) -> None:
        self._notifications = notifications or NotificationService()


class OrderCreatedHandler(IEventHandler[OrderCreated]):
    def handle(self, event: OrderCreated) -> None:
        logger.info(
            "order.created_event_handled",
            order_id=str(event.aggregate_id),
            total_price=str(event.total_price),
        )


class OrderPaidHandler(_NotifyingHandler, IEventHandler[OrderPaid]):
    """Sends the payment receipt."""

    def handle(self, event: OrderPaid) -> None:
        if not event.email:
            return
        self._notifications.send(
            event.email,
            "Payment received - your order is confirmed",
            RECEIPT_TEMPLATE.format(
                currency=event.currency,
                amount=from_minor_units(event.amount),
                reference=event.reference,
            ),
        )


class OrderStatusChangedHandler(_NotifyingHandler, IEventHandler[OrderStatusChanged]):
    """Tells the customer when the order ships or arrives."""

    def handle(self, event: OrderStatusChanged) -> None:
        if not event.email:
            return
        if event.new_status == OrderStatus.SHIPPED:
            subject = "Your order has shipped"
            body = SHIPPED_TEMPLATE.format(
                order_id=event.aggregate_id, tracking_number=event.tracking_number
            )
        elif event.new_status == OrderStatus.DELIVERED:
            subject = "Your order has been delivered"
            body = DELIVERED_TEMPLATE.format(order_id=event.aggregate_id)
        else:
            return
        self._notifications.send(event.email, subject, body)


class OrderCancelledHandler(_NotifyingHandler, IEventHandler[OrderCancelled]):
    def handle(self, event: OrderCancelled) -> None:
        if not event.email:
            return
        self._notifications.send(
            event.email,
            "Your order was cancelled",
            CANCELLED_TEMPLATE.format(order_id=event.aggregate_id),
        )


order_created_handler = OrderCreatedHandler()
order_paid_handler = OrderPaidHandler()
order_status_changed_handler = OrderStatusChangedHandler()
order_cancelled_handler = OrderCancelledHandler()
