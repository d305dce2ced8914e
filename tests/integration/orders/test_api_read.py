"""Integration tests for Order read endpoints.

Covers:
- GET /api/v1/orders/myorders/ (own orders, newest first).
- GET /api/v1/orders/{id}/ (owner or administrator).
- GET /api/v1/orders/admin/ (administrators only).
"""

from __future__ import annotations

import pytest

pytestmark = pytest.mark.integration

MY_ORDERS_URL = "/api/v1/orders/myorders/"
ADMIN_URL = "/api/v1/orders/admin/"


def detail_url(order_id) -> str:
    return f"/api/v1/orders/{order_id}/"


class TestMyOrders:
    def test_lists_only_own_orders(self, customer_client, customer, other_customer, make_order):
        mine = make_order(owner=customer)
        make_order(owner=other_customer)

        response = customer_client.get(MY_ORDERS_URL)

        assert response.status_code == 200
        assert [o["id"] for o in response.json()] == [str(mine.id)]

    def test_newest_first(self, customer_client, customer, make_order):
        first = make_order(owner=customer)
        second = make_order(owner=customer)

        ids = [o["id"] for o in customer_client.get(MY_ORDERS_URL).json()]

        assert ids == [str(second.id), str(first.id)]

    def test_empty_history(self, customer_client):
        response = customer_client.get(MY_ORDERS_URL)
        assert response.status_code == 200
        assert response.json() == []

    def test_requires_authentication(self, api_client):
        response = api_client.get(MY_ORDERS_URL)
        assert response.status_code == 401
        assert response.json() == {"message": "Not authorized, no token provided."}


class TestRetrieveOrder:
    def test_owner_sees_order(self, customer_client, customer, make_order):
        order = make_order(owner=customer)

        response = customer_client.get(detail_url(order.id))

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == str(order.id)
        assert data["orderItems"][0]["name"] == "Wireless Earbuds"

    def test_admin_sees_any_order(self, admin_client, customer, make_order):
        order = make_order(owner=customer)
        assert admin_client.get(detail_url(order.id)).status_code == 200

    def test_other_user_is_forbidden(self, other_customer_client, customer, make_order):
        order = make_order(owner=customer)

        response = other_customer_client.get(detail_url(order.id))

        assert response.status_code == 403
        assert response.json() == {"message": "Not authorized to view this order."}

    def test_unknown_order(self, customer_client):
        response = customer_client.get(detail_url("0192f1c4-0000-7000-8000-000000000000"))
        assert response.status_code == 404
        assert response.json() == {"message": "Order not found."}

    def test_malformed_id_is_404(self, customer_client):
        assert customer_client.get(detail_url("abc")).status_code == 404


class TestAdminOrders:
    def test_lists_every_order_with_owner_card(self, admin_client, customer, make_order):
        make_order(owner=customer)
        make_order()

        response = admin_client.get(ADMIN_URL)

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 2
        owners = [o["user"] for o in data]
        assert None in owners
        assert {"id": str(customer.id), "name": customer.name, "email": customer.email,
                "phoneNumber": customer.phone_number} in owners

    def test_regular_user_is_forbidden(self, customer_client):
        response = customer_client.get(ADMIN_URL)

        assert response.status_code == 403
        assert "not authorized to list orders" in response.json()["message"]
