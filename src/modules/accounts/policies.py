"""Access policy: who may invoke which order operation.

Authorization is data, not control flow: ``OPERATION_ROLES`` maps every
role-gated operation to the set of roles allowed to perform it and
``is_allowed`` is a pure look-up over that table.  Ownership rules
(a user acting on their own order) live in the order service, which
combines them with these checks.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional
from uuid import UUID

import structlog
from pydantic import BaseModel, ConfigDict

from modules.accounts.constants import ADMIN_ROLES, Role
from modules.core.exceptions import AuthenticationError, AuthorizationError

logger = structlog.get_logger(__name__)


class Operation(str, Enum):
    CREATE_ORDER = "create_order"
    LIST_MY_ORDERS = "list_my_orders"
    CANCEL_OWN_ORDER = "cancel_own_order"
    DELETE_OWN_ORDER = "delete_own_order"
    LIST_ORDERS = "list_orders"
    VIEW_ANY_ORDER = "view_any_order"
    UPDATE_ORDER_STATUS = "update_order_status"
    CANCEL_ANY_ORDER = "cancel_any_order"


ALL_ROLES: frozenset[Role] = frozenset(Role)
_ADMINS: frozenset[Role] = frozenset(Role(role) for role in ADMIN_ROLES)

OPERATION_ROLES: dict[Operation, frozenset[Role]] = {
    Operation.CREATE_ORDER: ALL_ROLES,
    Operation.LIST_MY_ORDERS: ALL_ROLES,
    Operation.CANCEL_OWN_ORDER: ALL_ROLES,
    Operation.DELETE_OWN_ORDER: ALL_ROLES,
    Operation.LIST_ORDERS: _ADMINS,
    Operation.VIEW_ANY_ORDER: _ADMINS,
    Operation.UPDATE_ORDER_STATUS: _ADMINS,
    Operation.CANCEL_ANY_ORDER: _ADMINS,
}


class Identity(BaseModel):
    """The acting account, as seen by the order service."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    email: str
    role: Role

    @classmethod
    def from_user(cls, user: Any) -> Identity:
        return cls(id=user.id, email=user.email, role=Role(user.role))


def is_allowed(role: Role, operation: Operation) -> bool:
    return role in OPERATION_ROLES.get(operation, frozenset())


def require_authenticated(request: Any) -> Identity:
    """Return the request's identity or raise ``AuthenticationError``."""
    identity = require_optional_authenticated(request)
    if identity is None:
        raise AuthenticationError("Not authorized, no token provided.")
    return identity


def require_optional_authenticated(request: Any) -> Optional[Identity]:
    """Guest-permitting variant: ``None`` when the request is anonymous.

    An *invalid* token is still rejected upstream by the authentication
    backend; only the absence of credentials yields ``None``.
    """
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        return None
    return Identity.from_user(user)


def require_role(identity: Optional[Identity], operation: Operation) -> None:
    """Raise unless *identity* holds a role allowed to perform *operation*."""
    if identity is None:
        raise AuthenticationError("Not authorized, no user context.")
    if not is_allowed(identity.role, operation):
        logger.warning(
            "access.denied",
            user_id=str(identity.id),
            role=identity.role.value,
            operation=operation.value,
        )
        raise AuthorizationError(
            f"Access denied: {identity.role.value} is not authorized to {operation.value.replace('_', ' ')}."
        )
