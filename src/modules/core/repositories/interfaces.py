"""Generic repository interface (Dependency Inversion Principle).

Provides ``IRepository[T]``, the base abstract class that domain-specific
repository interfaces extend.  Service-layer code depends on this
abstraction, never on the Django ORM directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Iterator, Optional, Protocol, TypeVar

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Queryable(Protocol[T_co]):
    """Lazy, further-filterable result set (a Django ``QuerySet``)."""

    def __iter__(self) -> Iterator[T_co]: ...

    def filter(self, *args: Any, **kwargs: Any) -> Queryable[T_co]: ...

    def count(self) -> int: ...


class IRepository(ABC, Generic[T]):
    """Base generic repository contract.

    Type parameter ``T`` is the aggregate managed by the repository.
    Look-ups return ``None`` for missing (or malformed) identifiers; the
    service decides which domain error that becomes.
    """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve an aggregate by its primary key."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> Queryable[T]:
        """List aggregates with optional ORM look-ups."""

    @abstractmethod
    def save(self, entity: T) -> T:
        """Persist (create or update) an aggregate."""

    @abstractmethod
    def delete(self, entity: T) -> None:
        """Permanently remove an aggregate."""
