"""Payment gateway exceptions."""

from __future__ import annotations

from rest_framework import status

from modules.core.exceptions import DomainError


class PaymentGatewayError(DomainError):
    """The gateway was unreachable, timed out or answered with an error.

    Never retried here; the client re-initiates the payment.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Could not connect to the payment gateway."
