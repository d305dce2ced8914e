"""Order and OrderItem models.

Rules enforced at the database level as well as in the service:
- ``order_status`` only ever holds one of the four lifecycle values.
- ``paid_at`` is set exactly when ``is_paid`` is true.
- ``is_delivered`` / ``delivered_at`` are set exactly when the order is
  Delivered.
- Item quantities are >= 1 and prices / totals are non-negative.

Items are a snapshot of what the client sent at checkout: there is no
catalog to reconcile against, so ``product_ref`` is an opaque string.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel
from modules.orders.constants import (
    DEFAULT_COURIER,
    DEFAULT_CURRENCY,
    DEFAULT_ITEM_IMAGE,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    OrderStatus,
    PaymentMethod,
)
from modules.payments.dtos import TransactionVerification, to_minor_units
from shared.domain.events import DomainEventMixin


class Order(DomainEventMixin, BaseModel):
    """Order aggregate root.

    The UUIDv7 ``id`` doubles as the Paystack transaction reference, so a
    verification callback identifies its order without a lookup table.

    ``owner`` is ``None`` for guest checkouts; ``customer_email`` is
    always filled and is where receipts are sent.
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    customer_email = models.EmailField()

    # Shipping address
    shipping_address = models.CharField(max_length=255)
    shipping_city = models.CharField(max_length=100)
    shipping_postal_code = models.CharField(max_length=20)
    shipping_country = models.CharField(max_length=100)

    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.PAYSTACK,
    )
    total_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    # Payment result, filled by a successful verification
    payment_provider_id = models.CharField(max_length=100, blank=True, default="")
    payment_provider_status = models.CharField(max_length=50, blank=True, default="")
    payment_reference = models.CharField(
        max_length=100, blank=True, default="", db_index=True
    )
    payment_amount = models.PositiveBigIntegerField(null=True, blank=True)
    payment_currency = models.CharField(max_length=3, default=DEFAULT_CURRENCY)

    order_status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PROCESSING,
    )
    is_paid = models.BooleanField(default=False)
    paid_at = models.DateTimeField(null=True, blank=True)
    is_delivered = models.BooleanField(default=False)
    delivered_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    # Delivery details
    courier = models.CharField(max_length=100, default=DEFAULT_COURIER)
    tracking_number = models.CharField(max_length=50, blank=True, default="")
    estimated_delivery = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["order_status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
            models.Index(fields=["owner", "-created_at"], name="orders_owner_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(order_status__in=OrderStatus.values),
                name="orders_status_valid",
            ),
            models.CheckConstraint(
                condition=models.Q(total_price__gte=0),
                name="orders_total_price_non_negative",
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(is_paid=True, paid_at__isnull=False)
                    | models.Q(is_paid=False, paid_at__isnull=True)
                ),
                name="orders_paid_at_consistent",
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(
                        order_status=OrderStatus.DELIVERED,
                        is_delivered=True,
                        delivered_at__isnull=False,
                    )
                    | (
                        ~models.Q(order_status=OrderStatus.DELIVERED)
                        & models.Q(is_delivered=False, delivered_at__isnull=True)
                    )
                ),
                name="orders_delivery_consistent",
            ),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.order_status in TERMINAL_STATES

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in VALID_TRANSITIONS.get(self.order_status, set())

    def is_owned_by(self, user_id: Any) -> bool:
        return self.owner_id is not None and str(self.owner_id) == str(user_id)

    # ------------------------------------------------------------------
    # Payment
    # ------------------------------------------------------------------

    @property
    def expected_amount(self) -> int:
        """Order total in minor units (kobo), as the gateway reports it."""
        return to_minor_units(self.total_price)

    def mark_as_paid(
        self, verification: TransactionVerification, now: Optional[datetime] = None
    ) -> None:
        """Record a gateway-confirmed payment on the instance (not saved).

        An earlier ``paid_at`` (an administrator flagged the order paid
        first) is kept.
        """
        self.is_paid = True
        if self.paid_at is None:
            self.paid_at = now or timezone.now()
        self.payment_provider_id = verification.provider_transaction_id or ""
        self.payment_provider_status = verification.provider_status or ""
        self.payment_reference = verification.reference
        self.payment_amount = verification.amount
        if verification.currency:
            self.payment_currency = verification.currency

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"Order {self.id} ({self.order_status})"


class OrderItem(BaseModel):
    """Line item captured at checkout.

    ``unit_price`` is the price the client was shown; the order total is
    taken from the request as-is and not recomputed from items.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    image = models.CharField(max_length=500, default=DEFAULT_ITEM_IMAGE)
    product_ref = models.CharField(max_length=64)

    class Meta:
        db_table = "order_items"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(unit_price__gte=0),
                name="order_items_unit_price_non_negative",
            ),
        ]

    @property
    def subtotal(self) -> Decimal:
        return self.quantity * self.unit_price

    def __str__(self) -> str:
        return f"{self.name} x{self.quantity}"
