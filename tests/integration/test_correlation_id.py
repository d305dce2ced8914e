import logging
import uuid

import pytest

pytestmark = pytest.mark.integration


class TestCorrelationIdMiddleware:
    def test_echoes_provided_request_id(self, api_client_with_correlation):
        client, cid = api_client_with_correlation
        response = client.get("/health")
        assert response["X-Request-ID"] == cid

    def test_generates_uuid_when_absent(self, client):
        request_id = client.get("/health")["X-Request-ID"]
        assert str(uuid.UUID(request_id, version=4)) == request_id

    def test_service_logs_carry_correlation_id(
        self, api_client_with_correlation, customer, order_payload, gateway, caplog
    ):
        client, cid = api_client_with_correlation
        client.force_authenticate(user=customer)

        with caplog.at_level(logging.INFO):
            client.post("/api/v1/orders/", order_payload, format="json")

        service_lines = [
            r.getMessage() for r in caplog.records if "order.payment_initialized" in r.getMessage()
        ]
        assert service_lines
        assert cid in service_lines[0]

    def test_request_finished_reports_duration(self, client, caplog):
        with caplog.at_level(logging.INFO):
            client.get("/health", HTTP_X_REQUEST_ID="timing-check")

        finished = [r.getMessage() for r in caplog.records if "request_finished" in r.getMessage()]
        assert finished
        assert "duration_ms" in finished[0]
