"""Unit tests for the order status state machine.

Covers:
- Transition table: allowed moves, re-entering active states, terminal state.
- Side effects applied when entering each state.
"""

from __future__ import annotations

import re
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from modules.orders.constants import (
    DEFAULT_COURIER,
    IN_TRANSIT_COURIER,
    VALID_TRANSITIONS,
    OrderStatus,
)
from modules.orders.exceptions import InvalidOrderStatus
from modules.orders.models import Order
from modules.orders.state_machine import (
    apply_transition,
    can_transition,
    generate_tracking_number,
)

pytestmark = pytest.mark.unit


def _order(status=OrderStatus.PROCESSING, **kwargs) -> Order:
    return Order(total_price=Decimal("5000.00"), order_status=status, **kwargs)


# ---------------------------------------------------------------------------
# Transition table
# ---------------------------------------------------------------------------


class TestTransitionTable:
    @pytest.mark.parametrize(
        "current,target",
        [
            (OrderStatus.PROCESSING, OrderStatus.SHIPPED),
            (OrderStatus.PROCESSING, OrderStatus.DELIVERED),
            (OrderStatus.PROCESSING, OrderStatus.CANCELLED),
            (OrderStatus.SHIPPED, OrderStatus.DELIVERED),
            (OrderStatus.SHIPPED, OrderStatus.PROCESSING),
            (OrderStatus.DELIVERED, OrderStatus.SHIPPED),
            (OrderStatus.DELIVERED, OrderStatus.PROCESSING),
        ],
    )
    def test_allowed(self, current, target):
        assert can_transition(current, target)

    @pytest.mark.parametrize(
        "status", [OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED]
    )
    def test_active_states_can_be_reentered(self, status):
        assert can_transition(status, status)

    def test_cancelled_cannot_be_reentered(self):
        assert not can_transition(OrderStatus.CANCELLED, OrderStatus.CANCELLED)

    @pytest.mark.parametrize(
        "target",
        [OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED],
    )
    def test_cancelled_is_terminal(self, target):
        assert not can_transition(OrderStatus.CANCELLED, target)
        assert VALID_TRANSITIONS[OrderStatus.CANCELLED] == set()

    def test_shipped_and_delivered_cannot_be_cancelled(self):
        assert not can_transition(OrderStatus.SHIPPED, OrderStatus.CANCELLED)
        assert not can_transition(OrderStatus.DELIVERED, OrderStatus.CANCELLED)

    def test_unknown_status_has_no_transitions(self):
        assert not can_transition("Lost", OrderStatus.SHIPPED)

    def test_invalid_transition_raises_and_leaves_order_untouched(self):
        order = _order(OrderStatus.CANCELLED)
        with pytest.raises(InvalidOrderStatus, match="Cannot transition from Cancelled to Shipped"):
            apply_transition(order, OrderStatus.SHIPPED)
        assert order.order_status == OrderStatus.CANCELLED
        assert order.tracking_number == ""


# ---------------------------------------------------------------------------
# Side effects
# ---------------------------------------------------------------------------


class TestSideEffects:
    def test_shipped_marks_paid_and_assigns_tracking(self):
        order = _order()
        now = timezone.now()

        previous = apply_transition(order, OrderStatus.SHIPPED, now=now)

        assert previous == OrderStatus.PROCESSING
        assert order.order_status == OrderStatus.SHIPPED
        assert order.is_paid is True
        assert order.paid_at == now
        assert order.courier == IN_TRANSIT_COURIER
        assert re.fullmatch(r"TRK-[0-9A-F]{8}", order.tracking_number)
        assert order.is_delivered is False
        assert order.delivered_at is None

    def test_existing_paid_at_is_kept(self):
        paid_at = timezone.now() - timedelta(days=2)
        order = _order(is_paid=True, paid_at=paid_at)

        apply_transition(order, OrderStatus.DELIVERED)

        assert order.paid_at == paid_at

    def test_delivered_sets_delivery_fields(self):
        order = _order(OrderStatus.SHIPPED, is_paid=True, paid_at=timezone.now())
        now = timezone.now()

        apply_transition(order, OrderStatus.DELIVERED, now=now)

        assert order.is_delivered is True
        assert order.delivered_at == now

    def test_back_to_processing_clears_delivery(self):
        now = timezone.now()
        order = _order(
            OrderStatus.DELIVERED,
            is_paid=True,
            paid_at=now,
            is_delivered=True,
            delivered_at=now,
        )

        apply_transition(order, OrderStatus.PROCESSING)

        assert order.order_status == OrderStatus.PROCESSING
        assert order.is_delivered is False
        assert order.delivered_at is None
        assert order.is_paid is True

    def test_delivered_back_to_shipped_issues_new_tracking_number(self):
        now = timezone.now()
        order = _order(
            OrderStatus.DELIVERED,
            is_paid=True,
            paid_at=now,
            is_delivered=True,
            delivered_at=now,
            tracking_number="TRK-00000000",
        )

        apply_transition(order, OrderStatus.SHIPPED)

        assert order.is_delivered is False
        assert order.tracking_number != "TRK-00000000"

    def test_cancel_stamps_cancelled_at_and_keeps_payment_flag(self):
        order = _order()
        now = timezone.now()

        apply_transition(order, OrderStatus.CANCELLED, now=now)

        assert order.cancelled_at == now
        assert order.is_paid is False
        assert order.courier == DEFAULT_COURIER


def test_tracking_number_format():
    assert re.fullmatch(r"TRK-[0-9A-F]{8}", generate_tracking_number())


def test_reentering_processing_marks_unpaid_order_paid():
    order = _order()
    now = timezone.now()

    previous = apply_transition(order, OrderStatus.PROCESSING, now=now)

    assert previous == OrderStatus.PROCESSING
    assert order.is_paid is True
    assert order.paid_at == now


def test_reentering_shipped_reissues_tracking_number():
    order = _order(
        OrderStatus.SHIPPED,
        is_paid=True,
        paid_at=timezone.now(),
        tracking_number="TRK-00000000",
    )

    apply_transition(order, OrderStatus.SHIPPED)

    assert order.order_status == OrderStatus.SHIPPED
    assert order.tracking_number != "TRK-00000000"
    assert re.fullmatch(r"TRK-[0-9A-F]{8}", order.tracking_number)
