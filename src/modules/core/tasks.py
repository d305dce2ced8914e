"""Outbox relay.

Customer-facing side effects already run from the in-process bus after
commit.  The relay drains pending outbox rows by writing each one as a
structured log line on the ``outbox`` logger and marking it published.
Nothing in this project consumes those lines; they are the audit trail
of order lifecycle events in the application log.
"""

import structlog
from celery import shared_task
from django.db import transaction

from modules.core.models import OutboxEvent

logger = structlog.get_logger(__name__)
stream = structlog.get_logger("outbox")

DEFAULT_BATCH_SIZE = 100


@shared_task(name="core.relay_outbox", ignore_result=True)
def relay_outbox(batch_size: int = DEFAULT_BATCH_SIZE) -> int:
    """Log and mark published up to *batch_size* pending rows, oldest first."""
    published = 0
    with transaction.atomic():
        rows = OutboxEvent.pending().select_for_update(skip_locked=True)[:batch_size]
        for row in rows:
            if not isinstance(row.payload, dict):
                row.mark_as_failed("Payload is not a JSON object.")
                logger.error("outbox.relay_failed", event_id=str(row.id))
                continue
            stream.info(
                row.event_type,
                topic=row.topic,
                aggregate_id=row.aggregate_id,
                payload=row.payload,
            )
            row.mark_as_published()
            published += 1

    if published:
        logger.info("outbox.relayed", count=published)
    return published
