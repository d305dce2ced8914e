"""Domain events for the Orders bounded context.

Every event is written to the outbox in the transaction that produced it
and published on the in-process bus after commit.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from uuid import UUID

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderCreated(DomainEvent):
    """Raised when an unpaid order is persisted."""

    owner_id: Optional[UUID] = None
    total_price: Decimal = Decimal("0.00")
    email: str = ""


@dataclass(frozen=True)
class OrderPaid(DomainEvent):
    """Raised when a gateway-verified payment is applied."""

    reference: str = ""
    amount: int = 0
    currency: str = ""
    email: str = ""


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Raised when an administrator moves an order between states."""

    old_status: str = ""
    new_status: str = ""
    email: str = ""
    tracking_number: str = ""


@dataclass(frozen=True)
class OrderCancelled(DomainEvent):
    old_status: str = ""
    cancelled_by: Optional[UUID] = None
    email: str = ""


@dataclass(frozen=True)
class OrderDeleted(DomainEvent):
    """Raised when an owner removes a delivered order from history."""

    owner_id: Optional[UUID] = None
