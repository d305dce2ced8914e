"""Integration tests for OrderDjangoRepository.

Covers:
- Create success: order + items persisted atomically.
- Create atomicity: a rejected item rolls back the entire aggregate.
- Read performance: get_by_id loads relations without N+1 queries.
- Locking: get_for_update returns the order.
- Listing: newest first, per owner.
- Save/delete write pending domain events to the outbox.
"""

from __future__ import annotations

from decimal import Decimal

import pytest
from django.db import IntegrityError

from modules.core.models import OutboxEvent
from modules.orders.constants import OrderStatus
from modules.orders.events import OrderDeleted, OrderStatusChanged
from modules.orders.models import Order, OrderItem
from modules.orders.repositories.django_repository import OrderDjangoRepository

pytestmark = pytest.mark.integration


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def repo():
    return OrderDjangoRepository()


@pytest.fixture()
def order_data(customer):
    return {
        "owner_id": customer.id,
        "customer_email": customer.email,
        "shipping_address": "3 Awolowo Road",
        "shipping_city": "Ibadan",
        "shipping_postal_code": "200212",
        "shipping_country": "Nigeria",
        "total_price": Decimal("45.50"),
        "items": [
            {"name": "Desk Lamp", "quantity": 2, "unit_price": Decimal("10.00"), "product_ref": "lamp"},
            {"name": "Notebook", "quantity": 1, "unit_price": Decimal("25.50"), "product_ref": "book"},
        ],
    }


@pytest.fixture()
def created_order(repo, order_data):
    return repo.create(order_data)


# ===========================================================================
# CREATE
# ===========================================================================


class TestOrderRepoCreate:
    def test_create_persists_order(self, repo, order_data, customer):
        order = repo.create(order_data)

        assert order.pk is not None
        assert order.owner_id == customer.id
        assert order.order_status == OrderStatus.PROCESSING
        assert order.is_paid is False
        assert order.courier == "Not Assigned"

    def test_create_persists_items(self, repo, order_data):
        order = repo.create(order_data)

        items = {item.product_ref: item for item in order.items.all()}
        assert len(items) == 2
        assert items["lamp"].subtotal == Decimal("20.00")
        assert items["book"].quantity == 1

    def test_create_does_not_mutate_input(self, repo, order_data):
        repo.create(order_data)
        assert len(order_data["items"]) == 2

    def test_create_atomicity_rolls_back_on_item_failure(self, repo, order_data):
        """A rejected item must take the order down with it."""
        order_data["items"][1]["quantity"] = 0

        with pytest.raises(IntegrityError):
            repo.create(order_data)

        assert Order.objects.count() == 0
        assert OrderItem.objects.count() == 0


# ===========================================================================
# READ
# ===========================================================================


class TestOrderRepoRead:
    def test_get_by_id_returns_order(self, repo, created_order):
        order = repo.get_by_id(str(created_order.id))
        assert order is not None
        assert order.id == created_order.id

    def test_get_by_id_returns_none_for_missing(self, repo):
        assert repo.get_by_id("00000000-0000-0000-0000-000000000000") is None

    def test_get_by_id_returns_none_for_invalid_uuid(self, repo):
        assert repo.get_by_id("not-a-uuid") is None

    def test_get_by_id_no_n_plus_one(self, repo, created_order, django_assert_num_queries):
        with django_assert_num_queries(2):
            # 1: SELECT order JOIN owner (select_related)
            # 2: SELECT order_items (prefetch_related)
            order = repo.get_by_id(str(created_order.id))
            _ = order.owner.email
            list(order.items.all())

    def test_get_for_update(self, repo, created_order):
        order = repo.get_for_update(str(created_order.id))
        assert order.id == created_order.id
        assert repo.get_for_update("nope") is None

    def test_list_newest_first(self, repo, order_data):
        first = repo.create(order_data)
        second = repo.create(order_data)

        assert [o.id for o in repo.list()] == [second.id, first.id]

    def test_list_with_filters(self, repo, created_order):
        assert repo.list({"order_status": OrderStatus.PROCESSING}).count() == 1
        assert repo.list({"order_status": OrderStatus.SHIPPED}).count() == 0

    def test_list_for_owner(self, repo, created_order, customer, other_customer):
        assert list(repo.list_for_owner(customer.id)) == [created_order]
        assert repo.list_for_owner(other_customer.id).count() == 0


# ===========================================================================
# SAVE / DELETE
# ===========================================================================


class TestOrderRepoWrite:
    def test_save_writes_outbox_and_clears_events(self, repo, created_order):
        created_order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=created_order.id, old_status="Processing", new_status="Shipped"
            )
        )

        repo.save(created_order)

        row = OutboxEvent.objects.get()
        assert row.event_type == "OrderStatusChanged"
        assert row.payload["new_status"] == "Shipped"
        assert created_order.domain_events == []

    def test_save_without_events(self, repo, created_order):
        repo.save(created_order)
        assert OutboxEvent.objects.count() == 0

    def test_delete_cascades_items_and_keeps_event(self, repo, created_order):
        created_order.add_domain_event(OrderDeleted(aggregate_id=created_order.id))

        repo.delete(created_order)

        assert Order.objects.count() == 0
        assert OrderItem.objects.count() == 0
        assert OutboxEvent.objects.get().event_type == "OrderDeleted"
