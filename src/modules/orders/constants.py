"""Order domain constants.

Defines status and payment-method choices and the transition table of the
order state machine (see ``modules.orders.state_machine``).
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PROCESSING = "Processing", "Processing"
    SHIPPED = "Shipped", "Shipped"
    DELIVERED = "Delivered", "Delivered"
    CANCELLED = "Cancelled", "Cancelled"


class PaymentMethod(models.TextChoices):
    PAYSTACK = "Paystack", "Paystack"
    FLUTTERWAVE = "Flutterwave", "Flutterwave"
    STRIPE = "Stripe", "Stripe"
    PAYPAL = "PayPal", "PayPal"
    CASH_ON_DELIVERY = "CashOnDelivery", "Cash on delivery"


# Targets an administrator may request through the status endpoint.
# Cancellation has its own operation (owner or admin, Processing only).
ADMIN_SETTABLE_STATUSES: frozenset[str] = frozenset(
    {OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED}
)

# Backward moves between the three active states are admin corrections
# (e.g. a parcel scanned as delivered by mistake).  Re-entering an active
# state reapplies its effects: Processing -> Processing is how an admin
# marks an order paid, Shipped -> Shipped reissues the tracking number.
VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.PROCESSING: {
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.SHIPPED: {
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
    },
    OrderStatus.DELIVERED: {
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
    },
    OrderStatus.CANCELLED: set(),
}

TERMINAL_STATES: set[str] = {OrderStatus.CANCELLED}

DEFAULT_COURIER = "Not Assigned"
IN_TRANSIT_COURIER = "In transit"
TRACKING_NUMBER_PREFIX = "TRK"

DEFAULT_ITEM_IMAGE = "https://via.placeholder.com/300x300.png?text=No+Image"
DEFAULT_CURRENCY = "NGN"
