"""Unit tests for the OutboxEvent model.

Covers:
- Default status and JSON payload round trip.
- ``pending()`` ordering and filtering.
- mark_as_published() / mark_as_failed(error) transitions.
"""

from __future__ import annotations

import pytest

from modules.core.models import EventStatus, OutboxEvent

pytestmark = pytest.mark.unit


def _make_event(**overrides) -> OutboxEvent:
    defaults = {
        "event_type": "OrderPaid",
        "payload": {"reference": "ref-123", "amount": 500000},
        "aggregate_id": "ref-123",
        "topic": "orders",
    }
    defaults.update(overrides)
    return OutboxEvent.objects.create(**defaults)


class TestOutboxEventCreation:
    def test_defaults(self):
        event = _make_event()
        event.refresh_from_db()
        assert event.status == EventStatus.PENDING
        assert event.processed_at is None
        assert event.error_message is None
        assert event.retry_count == 0

    def test_payload_round_trip(self):
        payload = {"order_id": "xyz", "items": [1, 2], "nested": {"currency": "NGN"}}
        event = _make_event(payload=payload)
        event.refresh_from_db()
        assert event.payload == payload


class TestPending:
    def test_pending_excludes_processed_rows(self):
        waiting = _make_event(aggregate_id="a")
        published = _make_event(aggregate_id="b")
        failed = _make_event(aggregate_id="c")
        published.mark_as_published()
        failed.mark_as_failed("broker down")

        assert list(OutboxEvent.pending()) == [waiting]

    def test_pending_is_oldest_first(self):
        first = _make_event(aggregate_id="1")
        second = _make_event(aggregate_id="2")
        assert list(OutboxEvent.pending()) == [first, second]


class TestTransitions:
    def test_mark_as_published(self):
        event = _make_event()
        event.mark_as_published()
        event.refresh_from_db()

        assert event.status == EventStatus.PUBLISHED
        assert event.processed_at is not None

    def test_mark_as_failed_increments_retry(self):
        event = _make_event()
        event.mark_as_failed("Error 1")
        event.mark_as_failed("Error 2")
        event.refresh_from_db()

        assert event.status == EventStatus.FAILED
        assert event.retry_count == 2
        assert event.error_message == "Error 2"


def test_str_representation():
    event = _make_event(event_type="OrderCancelled", aggregate_id="order-456")
    result = str(event)
    assert "OrderCancelled" in result
    assert "PENDING" in result
    assert "order-456" in result
