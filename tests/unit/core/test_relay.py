"""Unit tests for the outbox relay task."""

from __future__ import annotations

import logging

import pytest

from modules.core.models import EventStatus, OutboxEvent
from modules.core.tasks import relay_outbox

pytestmark = pytest.mark.unit


def _row(**overrides) -> OutboxEvent:
    defaults = {
        "event_type": "OrderCreated",
        "payload": {"event_name": "OrderCreated"},
        "aggregate_id": "order-1",
        "topic": "orders",
    }
    defaults.update(overrides)
    return OutboxEvent.objects.create(**defaults)


def test_publishes_pending_rows():
    first, second = _row(), _row(event_type="OrderPaid")

    assert relay_outbox() == 2

    first.refresh_from_db()
    second.refresh_from_db()
    assert first.status == EventStatus.PUBLISHED
    assert second.processed_at is not None
    assert not OutboxEvent.pending().exists()


def test_respects_batch_size():
    _row(), _row(), _row()

    assert relay_outbox(batch_size=2) == 2
    assert OutboxEvent.pending().count() == 1


def test_malformed_payload_marked_failed():
    broken = _row(payload=["not", "an", "object"])

    assert relay_outbox() == 0

    broken.refresh_from_db()
    assert broken.status == EventStatus.FAILED
    assert broken.retry_count == 1


def test_nothing_pending():
    assert relay_outbox() == 0


def test_rows_are_written_to_the_outbox_logger(caplog):
    _row(event_type="OrderPaid", aggregate_id="order-42")

    with caplog.at_level(logging.INFO, logger="outbox"):
        relay_outbox()

    lines = [r.getMessage() for r in caplog.records if r.name == "outbox"]
    assert len(lines) == 1
    assert "OrderPaid" in lines[0]
    assert "order-42" in lines[0]
