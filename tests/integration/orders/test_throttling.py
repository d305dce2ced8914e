"""Integration tests for throttling on the order API."""

from __future__ import annotations

import pytest
from django.core.cache import cache

pytestmark = pytest.mark.integration


def test_order_creation_is_throttled(customer_client, order_payload, gateway):
    cache.clear()

    for _ in range(10):
        response = customer_client.post("/api/v1/orders/", order_payload, format="json")
        assert response.status_code == 201

    response = customer_client.post("/api/v1/orders/", order_payload, format="json")
    assert response.status_code == 429
    assert "message" in response.json()


def test_order_listing_has_higher_limit(customer_client):
    cache.clear()

    for _ in range(15):
        response = customer_client.get("/api/v1/orders/myorders/")
        assert response.status_code == 200
