"""Order service layer (Use Cases).

Orchestrates order creation, payment reconciliation, administrative
status management, cancellation and deletion.  The service defines the
unit-of-work boundary: every mutation runs in ``transaction.atomic``
with the order row locked, and domain events reach the in-process bus
only after the transaction commits.

Gateway calls never run inside a transaction: a slow Paystack response
must not hold a row lock or an open connection.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Any, Optional

import structlog
from django.db import transaction

from modules.accounts.policies import Identity, Operation, is_allowed, require_role
from modules.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ValidationError,
)
from modules.orders.constants import ADMIN_SETTABLE_STATUSES, OrderStatus, PaymentMethod
from modules.orders.events import (
    OrderCancelled,
    OrderCreated,
    OrderDeleted,
    OrderPaid,
    OrderStatusChanged,
)
from modules.orders.exceptions import (
    AmountMismatchError,
    InvalidOrderStatus,
    OrderNotFound,
    PaymentVerificationError,
)
from modules.orders.state_machine import apply_transition
from modules.payments.dtos import TransactionInitialization
from shared.infrastructure.bus import event_bus as default_event_bus

if TYPE_CHECKING:
    from modules.core.repositories.interfaces import Queryable
    from modules.orders.dtos import CreateOrderDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.payments.gateway import IPaymentGateway
    from shared.domain.bus import IEventBus

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class OrderCreationResult:
    order: Order
    payment: TransactionInitialization


class OrderService:
    """Application service for Order use-cases.

    Receives its repository, payment gateway and event bus via
    constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        payment_gateway: IPaymentGateway,
        event_bus: Optional[IEventBus] = None,
    ) -> None:
        self._order_repo = order_repository
        self._payment_gateway = payment_gateway
        self._event_bus = event_bus or default_event_bus

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(
        self, actor: Optional[Identity], dto: CreateOrderDTO
    ) -> OrderCreationResult:
        """Persist an unpaid order and open a Paystack checkout for it.

        ``actor`` is ``None`` for a guest checkout; the guest's ``email``
        must then be part of the request.  If the gateway refuses, the
        order stays as an unpaid Processing record the client may retry.

        Raises:
            ValidationError: no items, a payment method other than
                Paystack, or a guest without an email.
            PaymentGatewayError: Paystack could not initialize the payment.
        """
        if actor is not None:
            require_role(actor, Operation.CREATE_ORDER)
        if not dto.items:
            raise ValidationError("No order items.")
        if dto.payment_method != PaymentMethod.PAYSTACK:
            raise ValidationError(
                f"Unsupported payment method: {dto.payment_method}. "
                "Only Paystack checkout is available."
            )

        email = actor.email if actor is not None else dto.email
        if not email:
            raise ValidationError("An email address is required for guest checkout.")

        log = logger.bind(
            owner_id=str(actor.id) if actor else None, item_count=len(dto.items)
        )
        log.info("order.creation_started")

        with transaction.atomic():
            order = self._order_repo.create(
                {
                    "owner_id": actor.id if actor else None,
                    "customer_email": email,
                    "shipping_address": dto.shipping_address.address,
                    "shipping_city": dto.shipping_address.city,
                    "shipping_postal_code": dto.shipping_address.postal_code,
                    "shipping_country": dto.shipping_address.country,
                    "payment_method": dto.payment_method,
                    "total_price": dto.total_price,
                    "items": [
                        {
                            "name": item.name,
                            "quantity": item.quantity,
                            "unit_price": item.unit_price,
                            "image": item.image,
                            "product_ref": item.product_ref,
                        }
                        for item in dto.items
                    ],
                }
            )
            order.add_domain_event(
                OrderCreated(
                    aggregate_id=order.id,
                    owner_id=actor.id if actor else None,
                    total_price=order.total_price,
                    email=email,
                )
            )
            self._persist(order)

        payment = self._payment_gateway.initialize_transaction(
            email=email,
            amount=order.expected_amount,
            reference=str(order.id),
        )
        log.info("order.payment_initialized", order_id=str(order.id))
        return OrderCreationResult(order=order, payment=payment)

    def verify_payment(self, reference: str) -> Order:
        """Confirm a payment with Paystack and mark the order paid.

        Idempotent: re-verifying a reference that was already applied
        returns the order unchanged, whether the second call comes from
        the browser redirect or the webhook.

        Raises:
            PaymentVerificationError: the gateway reports failure.
            OrderNotFound: no order carries this reference.
            InvalidOrderStatus: the order is cancelled, or already paid
                under another reference.
            AmountMismatchError: collected amount differs from the total.
            PaymentGatewayError: Paystack could not be reached.
        """
        log = logger.bind(reference=reference)
        verification = self._payment_gateway.verify_transaction(reference)
        if not verification.success:
            log.warning(
                "payment.unsuccessful",
                provider_status=verification.provider_status,
                gateway_message=verification.message,
            )
            raise PaymentVerificationError(
                f"Payment failed: {verification.message or 'transaction was not successful'}"
            )

        with transaction.atomic():
            order = self._order_repo.get_for_update(reference)
            if order is None:
                raise OrderNotFound("Order not found after payment.")

            if order.is_paid and order.payment_reference == reference:
                log.info("payment.already_applied", order_id=str(order.id))
                return order
            # An empty reference means an administrator flagged the order
            # paid; the gateway result is attached to it.
            if order.is_paid and order.payment_reference:
                log.warning(
                    "payment.reference_conflict",
                    order_id=str(order.id),
                    applied_reference=order.payment_reference,
                )
                raise InvalidOrderStatus(
                    "Order is already paid under a different payment reference."
                )
            if order.is_terminal:
                raise InvalidOrderStatus("Cannot apply a payment to a cancelled order.")

            expected = order.expected_amount
            if verification.amount != expected:
                log.warning(
                    "payment.amount_mismatch",
                    order_id=str(order.id),
                    expected=expected,
                    received=verification.amount,
                )
                raise AmountMismatchError("Payment verification failed: amount mismatch.")

            order.mark_as_paid(verification)
            order.add_domain_event(
                OrderPaid(
                    aggregate_id=order.id,
                    reference=reference,
                    amount=expected,
                    currency=order.payment_currency,
                    email=order.customer_email,
                )
            )
            self._persist(order)

        log.info("payment.verified", order_id=str(order.id), amount=expected)
        return order

    def update_order_status(
        self, actor: Optional[Identity], order_id: Any, status: str
    ) -> Order:
        """Administrative transition to Processing, Shipped or Delivered.

        Raises:
            AuthenticationError / AuthorizationError: not an administrator.
            OrderNotFound: no such order.
            ValidationError: *status* is not an admin-settable state.
            InvalidOrderStatus: the transition is not allowed.
        """
        require_role(actor, Operation.UPDATE_ORDER_STATUS)
        log = logger.bind(order_id=str(order_id), actor_id=str(actor.id))

        with transaction.atomic():
            order = self._order_repo.get_for_update(str(order_id))
            if order is None:
                raise OrderNotFound("Order not found.")

            target = _normalize_status(status)
            if target not in ADMIN_SETTABLE_STATUSES:
                raise ValidationError("Invalid status update.")

            old_status = apply_transition(order, target)
            order.add_domain_event(
                OrderStatusChanged(
                    aggregate_id=order.id,
                    old_status=old_status,
                    new_status=target,
                    email=order.customer_email,
                    tracking_number=order.tracking_number,
                )
            )
            self._persist(order)

        log.info("order.status_updated", old_status=old_status, new_status=target)
        return order

    def cancel_order(self, actor: Optional[Identity], order_id: Any) -> Order:
        """Cancel a Processing order.

        Owners may cancel their own order while it is unpaid; a paid
        order needs an administrator, who may cancel any Processing order.

        Raises:
            AuthenticationError: anonymous caller.
            OrderNotFound: no such order.
            AuthorizationError: not the owner and not an administrator.
            InvalidOrderStatus: the order left Processing, or an owner
                tries to cancel a paid order.
        """
        require_role(actor, Operation.CANCEL_OWN_ORDER)

        with transaction.atomic():
            order = self._order_repo.get_for_update(str(order_id))
            if order is None:
                raise OrderNotFound("Order not found.")

            as_admin = is_allowed(actor.role, Operation.CANCEL_ANY_ORDER)
            if not as_admin and not order.is_owned_by(actor.id):
                raise AuthorizationError("Not authorized to cancel this order.")
            if not order.can_transition_to(OrderStatus.CANCELLED):
                raise InvalidOrderStatus(
                    f"Order cannot be cancelled in status {order.order_status}."
                )
            if order.is_paid and not as_admin:
                raise InvalidOrderStatus(
                    "Paid orders can only be cancelled by an administrator."
                )

            old_status = apply_transition(order, OrderStatus.CANCELLED)
            order.add_domain_event(
                OrderCancelled(
                    aggregate_id=order.id,
                    old_status=old_status,
                    cancelled_by=actor.id,
                    email=order.customer_email,
                )
            )
            self._persist(order)

        logger.info(
            "order.cancelled", order_id=str(order.id), actor_id=str(actor.id), by_admin=as_admin
        )
        return order

    def delete_order(self, actor: Optional[Identity], order_id: Any) -> None:
        """Remove a delivered order from its owner's history.

        Raises:
            AuthenticationError: anonymous caller.
            OrderNotFound: no such order.
            AuthorizationError: the caller does not own the order.
            InvalidOrderStatus: the order is not Delivered.
        """
        require_role(actor, Operation.DELETE_OWN_ORDER)

        with transaction.atomic():
            order = self._order_repo.get_for_update(str(order_id))
            if order is None:
                raise OrderNotFound("Order not found.")
            if not order.is_owned_by(actor.id):
                raise AuthorizationError("Not authorized to delete this order. Access denied.")
            if order.order_status != OrderStatus.DELIVERED:
                raise InvalidOrderStatus(
                    'Order cannot be deleted. Only orders with "Delivered" status '
                    "can be removed from history."
                )

            order.add_domain_event(OrderDeleted(aggregate_id=order.id, owner_id=actor.id))
            events = order.domain_events
            self._order_repo.delete(order)
            self._publish_on_commit(events)

        logger.info("order.removed_from_history", order_id=str(order_id), actor_id=str(actor.id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_orders(self, actor: Optional[Identity]) -> Queryable[Order]:
        """All orders, newest first (administrators only)."""
        require_role(actor, Operation.LIST_ORDERS)
        return self._order_repo.list()

    def list_my_orders(self, actor: Optional[Identity]) -> Queryable[Order]:
        require_role(actor, Operation.LIST_MY_ORDERS)
        return self._order_repo.list_for_owner(actor.id)

    def get_order(self, actor: Optional[Identity], order_id: Any) -> Order:
        """Single order, visible to its owner and to administrators."""
        if actor is None:
            raise AuthenticationError("Not authorized, no user context.")

        order = self._order_repo.get_by_id(str(order_id))
        if order is None:
            raise OrderNotFound("Order not found.")
        if not order.is_owned_by(actor.id) and not is_allowed(
            actor.role, Operation.VIEW_ANY_ORDER
        ):
            raise AuthorizationError("Not authorized to view this order.")
        return order

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _persist(self, order: Order) -> None:
        events = order.domain_events
        self._order_repo.save(order)
        self._publish_on_commit(events)

    def _publish_on_commit(self, events: list) -> None:
        for event in events:
            transaction.on_commit(partial(self._event_bus.publish, event))


def _normalize_status(value: Any) -> str:
    """Match *value* case-insensitively against the known statuses."""
    text = str(value or "").strip().lower()
    for status in OrderStatus.values:
        if status.lower() == text:
            return status
    return text
