"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
All write operations are wrapped in ``transaction.atomic()`` so the
Order aggregate (Order + OrderItems + outbox rows) is persisted
atomically; nested inside a service transaction they become savepoints.

Concurrency control on payment and status updates uses
``select_for_update()`` (no ``version`` field exists on the model).
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import QuerySet

from modules.core.models import OutboxEvent
from modules.orders.models import Order, OrderItem
from modules.orders.repositories.interfaces import IOrderRepository
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)

OUTBOX_TOPIC = "orders"


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        data = dict(data)
        items = data.pop("items", [])

        order = Order(**data)
        order.save()
        OrderItem.objects.bulk_create(
            [OrderItem(order=order, **item_data) for item_data in items]
        )

        logger.info("order.created", order_id=str(order.id), item_count=len(items))
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def _base_queryset(self) -> QuerySet[Order]:
        return Order.objects.select_related("owner").prefetch_related("items")

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with its owner and items eager-loaded.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return self._base_queryset().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Order]:
        # No select_related: FOR UPDATE cannot lock the nullable side of
        # the owner outer join on PostgreSQL.
        try:
            return (
                Order.objects.select_for_update()
                .prefetch_related("items")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet[Order]:
        queryset = self._base_queryset()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset.order_by("-created_at", "-id")

    def list_for_owner(self, owner_id: Any) -> QuerySet[Order]:
        return self.list({"owner_id": owner_id})

    # ------------------------------------------------------------------
    # Save / Delete (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist an order and record its pending domain events."""
        entity.save()
        event_count = self._write_outbox(entity.domain_events)
        entity.clear_domain_events()

        logger.info("order.saved", order_id=str(entity.id), event_count=event_count)
        return entity

    @transaction.atomic
    def delete(self, entity: Order) -> None:
        """Hard-delete an order (items cascade); its events outlive it."""
        order_id = str(entity.id)
        self._write_outbox(entity.domain_events)
        entity.clear_domain_events()
        entity.delete()
        logger.info("order.deleted", order_id=order_id)

    @staticmethod
    def _write_outbox(events: Iterable[DomainEvent]) -> int:
        rows = [
            OutboxEvent(
                event_type=event.event_name,
                aggregate_id=str(event.aggregate_id),
                payload=event.to_payload(),
                topic=OUTBOX_TOPIC,
            )
            for event in events
        ]
        OutboxEvent.objects.bulk_create(rows)
        return len(rows)
