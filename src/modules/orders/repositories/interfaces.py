"""Order repository interface.

Extends ``IRepository[Order]`` with the methods the Order aggregate
needs: atomic creation with items, row-locked loading for writes and
per-owner listing.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from modules.core.repositories.interfaces import IRepository, Queryable

if TYPE_CHECKING:
    from modules.orders.models import Order


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The aggregate includes its OrderItem children.  ``save`` and
    ``delete`` also record the aggregate's pending domain events in the
    outbox, inside the caller's transaction.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items atomically.

        ``data`` holds the Order field values plus ``items``: a list of
        dicts with ``name``, ``quantity``, ``unit_price``, ``image`` and
        ``product_ref``.
        """

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Must be called inside ``transaction.atomic``.
        """

    @abstractmethod
    def list_for_owner(self, owner_id: Any) -> Queryable[Order]:
        """Orders placed by *owner_id*, newest first."""
