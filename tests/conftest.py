from __future__ import annotations

from decimal import Decimal
from typing import Optional

import pytest
from django.apps import apps
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.accounts.constants import Role
from modules.accounts.models import User
from modules.accounts.policies import Identity
from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderItem
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.payments.dtos import (
    TransactionInitialization,
    TransactionVerification,
    to_minor_units,
)
from modules.payments.exceptions import PaymentGatewayError


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    """Throttle counters live in the cache; start every test from zero."""
    cache.clear()
    yield
    cache.clear()


# ---------------------------------------------------------------------------
# Payment gateway double
# ---------------------------------------------------------------------------


class FakeGateway:
    """In-memory ``IPaymentGateway``.

    ``verifications`` maps a reference to the verdict returned for it;
    unknown references verify as a full, successful payment of the
    order carrying that reference.
    """

    def __init__(self) -> None:
        self.initialized: list[dict] = []
        self.verified: list[str] = []
        self.verifications: dict[str, TransactionVerification] = {}
        self.fail_initialize: Optional[str] = None

    def initialize_transaction(self, email: str, amount: int, reference: str):
        if self.fail_initialize:
            raise PaymentGatewayError(self.fail_initialize)
        self.initialized.append({"email": email, "amount": amount, "reference": reference})
        return TransactionInitialization(
            authorization_url=f"https://checkout.paystack.com/{reference}",
            reference=reference,
            access_code="access_test",
        )

    def verify_transaction(self, reference: str) -> TransactionVerification:
        self.verified.append(reference)
        if reference in self.verifications:
            return self.verifications[reference]
        order = OrderDjangoRepository().get_by_id(reference)
        amount = to_minor_units(order.total_price) if order else 0
        return TransactionVerification(
            success=True,
            reference=reference,
            amount=amount,
            currency="NGN",
            provider_transaction_id="4099260516",
            provider_status="success",
            message="Approved",
        )

    def close(self) -> None:
        pass


@pytest.fixture()
def gateway(monkeypatch):
    """Replace the process-wide Paystack gateway with ``FakeGateway``."""
    fake = FakeGateway()
    monkeypatch.setattr(apps.get_app_config("payments"), "gateway", fake)
    return fake


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


def _make_user(username: str, role: str = Role.USER, **extra) -> User:
    return User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password="testpass123",
        name=username.title(),
        role=role,
        **extra,
    )


@pytest.fixture()
def customer() -> User:
    return _make_user("ada", phone_number="+2348012345678")


@pytest.fixture()
def other_customer() -> User:
    return _make_user("bola")


@pytest.fixture()
def admin() -> User:
    return _make_user("chief", role=Role.ADMIN, is_staff=True)


@pytest.fixture()
def customer_identity(customer) -> Identity:
    return Identity.from_user(customer)


@pytest.fixture()
def admin_identity(admin) -> Identity:
    return Identity.from_user(admin)


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def customer_client(customer):
    client = APIClient()
    client.force_authenticate(user=customer)
    return client


@pytest.fixture()
def other_customer_client(other_customer):
    client = APIClient()
    client.force_authenticate(user=other_customer)
    return client


@pytest.fixture()
def admin_client(admin):
    client = APIClient()
    client.force_authenticate(user=admin)
    return client


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def order_payload():
    return {
        "orderItems": [
            {
                "name": "Wireless Earbuds",
                "qty": 2,
                "price": "2000.00",
                "image": "https://cdn.example.com/earbuds.png",
                "product": "prod-001",
            },
            {"name": "Phone Case", "qty": 1, "price": "1000.00", "product": "prod-007"},
        ],
        "shippingAddress": {
            "address": "12 Admiralty Way",
            "city": "Lagos",
            "postalCode": "106104",
            "country": "Nigeria",
        },
        "totalPrice": "5000.00",
        "paymentMethod": "Paystack",
    }


@pytest.fixture()
def make_order():
    """Factory for persisted orders in a given lifecycle state."""

    def _make(
        owner: Optional[User] = None,
        total: Decimal = Decimal("5000.00"),
        status: str = OrderStatus.PROCESSING,
        paid: bool = False,
        email: Optional[str] = None,
    ) -> Order:
        from django.utils import timezone

        now = timezone.now()
        is_paid = paid or status in {OrderStatus.SHIPPED, OrderStatus.DELIVERED}
        order = Order.objects.create(
            owner=owner,
            customer_email=email or (owner.email if owner else "guest@example.com"),
            shipping_address="12 Admiralty Way",
            shipping_city="Lagos",
            shipping_postal_code="106104",
            shipping_country="Nigeria",
            total_price=total,
            order_status=status,
            is_paid=is_paid,
            paid_at=now if is_paid else None,
            is_delivered=status == OrderStatus.DELIVERED,
            delivered_at=now if status == OrderStatus.DELIVERED else None,
            cancelled_at=now if status == OrderStatus.CANCELLED else None,
        )
        OrderItem.objects.create(
            order=order,
            name="Wireless Earbuds",
            quantity=1,
            unit_price=total,
            product_ref="prod-001",
        )
        return order

    return _make
