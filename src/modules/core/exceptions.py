"""Domain error taxonomy and the DRF exception handler.

Services raise these exceptions when a business rule is violated; they
carry the HTTP status the API layer should answer with.  Module-specific
errors (``modules.orders.exceptions``, ``modules.payments.exceptions``)
subclass them so the handler below can render every failure as a
``{"message": ...}`` body without per-view ``try``/``except`` blocks.
"""

from __future__ import annotations

from typing import Any, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = structlog.get_logger(__name__)


class DomainError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request could not be processed."

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DomainError):
    """Malformed input (e.g. an order without items)."""

    default_message = "Invalid request data."


class AuthenticationError(DomainError):
    """No identity, or an invalid one, was presented."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized, no token provided."


class AuthorizationError(DomainError):
    """The identity is valid but not allowed to perform the operation."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied."


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found."


class InvalidStateError(DomainError):
    """The operation is not allowed in the entity's current lifecycle state."""

    default_message = "Operation not allowed in the current state."


# ---------------------------------------------------------------------------
# DRF integration
# ---------------------------------------------------------------------------


def api_exception_handler(exc: Exception, context: dict[str, Any]) -> Optional[Response]:
    """Render domain, DRF and pydantic errors as ``{"message": ...}``.

    Field-level validation failures also carry an ``errors`` entry with
    the per-field details.  Anything else falls through to Django (500).
    """
    view = context.get("view")
    view_name = type(view).__name__ if view is not None else None

    if isinstance(exc, DomainError):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "api.domain_error",
            error=type(exc).__name__,
            message=exc.message,
            status_code=exc.status_code,
            view=view_name,
        )
        return Response({"message": exc.message}, status=exc.status_code)

    if isinstance(exc, PydanticValidationError):
        logger.warning("api.payload_invalid", view=view_name, error_count=exc.error_count())
        return Response(
            {
                "message": "Invalid request data.",
                "errors": exc.errors(include_url=False, include_context=False),
            },
            status=status.HTTP_400_BAD_REQUEST,
        )

    response = drf_exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, drf_exceptions.ValidationError):
        response.data = {"message": "Invalid request data.", "errors": response.data}
        return response

    detail = response.data.get("detail") if isinstance(response.data, dict) else None
    response.data = {"message": str(detail or exc)}
    return response
