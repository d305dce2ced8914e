"""Email delivery tasks (Resend)."""

from typing import Optional

import requests
import resend
import structlog
from celery import shared_task
from django.conf import settings
from resend.exceptions import ResendError

logger = structlog.get_logger(__name__)


@shared_task(name="notifications.send_email", ignore_result=True)
def send_email(to: str, subject: str, html: str) -> Optional[str]:
    """Send one email through Resend; returns the provider message id.

    Delivery problems are logged and end the task: a lost receipt must
    never surface as a failed order operation.
    """
    log = logger.bind(to=to, subject=subject)
    if not settings.RESEND_API_KEY:
        log.warning("notification.skipped", reason="RESEND_API_KEY is not set")
        return None

    resend.api_key = settings.RESEND_API_KEY
    try:
        response = resend.Emails.send(
            {
                "from": settings.NOTIFICATIONS_FROM_EMAIL,
                "to": [to],
                "subject": subject,
                "html": html,
            }
        )
    except (ResendError, requests.RequestException) as exc:
        log.error("notification.failed", error=str(exc))
        return None

    message_id = response.get("id") if isinstance(response, dict) else None
    log.info("notification.sent", message_id=message_id)
    return message_id
