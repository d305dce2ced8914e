"""Integration tests for the ``{"message": ...}`` error body."""

import pytest

pytestmark = pytest.mark.integration


class TestStandardizedErrors:
    def test_auth_error_has_message(self, api_client):
        response = api_client.get("/api/v1/orders/myorders/")
        assert response.status_code == 401
        assert response.json() == {"message": "Not authorized, no token provided."}

    def test_drf_auth_error_has_message(self, api_client):
        response = api_client.get("/api/v1/me")
        assert response.status_code == 401
        assert set(response.json()) == {"message"}

    def test_validation_error_has_field_details(self, customer_client):
        response = customer_client.post(
            "/api/v1/orders/", data="{", content_type="application/json"
        )
        assert response.status_code == 400
        assert "message" in response.json()

    def test_serializer_errors_listed_per_field(self, customer_client):
        response = customer_client.post("/api/v1/orders/", {}, format="json")
        data = response.json()
        assert response.status_code == 400
        assert data["message"] == "Invalid request data."
        assert {"orderItems", "shippingAddress", "totalPrice"} <= set(data["errors"])

    def test_not_found_has_message(self, customer_client):
        response = customer_client.get("/api/v1/orders/0192f1c4-0000-7000-8000-000000000000/")
        assert response.status_code == 404
        assert response.json() == {"message": "Order not found."}

    def test_forbidden_has_message(self, customer_client):
        response = customer_client.put(
            "/api/v1/orders/0192f1c4-0000-7000-8000-000000000000/status/",
            {"status": "Shipped"},
            format="json",
        )
        assert response.status_code == 403
        assert response.json()["message"].startswith("Access denied")
