"""Notification service: fire-and-forget email delivery.

Callers hand over a finished HTML body; delivery happens on a Celery
worker (``notifications.send_email``).  A broker outage is logged and
reported as ``False``, never raised.
"""

from __future__ import annotations

from typing import Any, Optional

import structlog
from kombu.exceptions import OperationalError

from modules.notifications.tasks import send_email

logger = structlog.get_logger(__name__)


class NotificationService:
    def __init__(self, task: Optional[Any] = None) -> None:
        self._task = task or send_email

    def send(self, to: str, subject: str, html_body: str) -> bool:
        """Queue an email.

        Raises:
            ValueError: recipient, subject or body is empty.
        """
        if not to:
            raise ValueError("Recipient email is required.")
        if not subject:
            raise ValueError("Email subject is required.")
        if not html_body:
            raise ValueError("Email content is required.")

        try:
            self._task.delay(to, subject, html_body)
        except OperationalError as exc:
            logger.error("notification.enqueue_failed", to=to, subject=subject, error=str(exc))
            return False

        logger.info("notification.enqueued", to=to, subject=subject)
        return True
