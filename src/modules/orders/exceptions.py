"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.  Each one
extends the shared taxonomy in ``modules.core.exceptions`` so the API
exception handler knows the HTTP status to answer with.
"""

from __future__ import annotations

from modules.core.exceptions import DomainError, InvalidStateError, NotFoundError


class OrderNotFound(NotFoundError):
    """The requested order does not exist."""

    default_message = "Order not found."


class InvalidOrderStatus(InvalidStateError):
    """The order's lifecycle state does not allow the operation."""


class AmountMismatchError(DomainError):
    """The gateway-confirmed amount differs from the order total.

    Guards against under-payment through a tampered reference or amount.
    """

    default_message = "Payment verification failed: amount mismatch."


class PaymentVerificationError(DomainError):
    """The gateway reports the transaction as not successful."""

    default_message = "Payment failed."
