"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.

The storefront speaks camelCase JSON (``orderItems``, ``totalPrice``,
``isPaid``...); the mapping onto snake_case model fields happens here
and nowhere else.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from rest_framework import serializers

from modules.orders.constants import DEFAULT_ITEM_IMAGE, PaymentMethod
from modules.orders.dtos import CreateOrderDTO, OrderItemDTO, ShippingAddressDTO
from modules.orders.models import Order, OrderItem

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class OrderItemInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    qty = serializers.IntegerField(min_value=1)
    price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00")
    )
    image = serializers.CharField(max_length=500, required=False, default=DEFAULT_ITEM_IMAGE)
    product = serializers.CharField(max_length=64)


class ShippingAddressSerializer(serializers.Serializer):
    address = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=100)
    postalCode = serializers.CharField(max_length=20)
    country = serializers.CharField(max_length=100)


class CreateOrderSerializer(serializers.Serializer):
    """Validates the checkout payload.

    An empty ``orderItems`` list passes here and is rejected by the
    service with ``"No order items."``.
    """

    orderItems = OrderItemInputSerializer(many=True, allow_empty=True)
    shippingAddress = ShippingAddressSerializer()
    totalPrice = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00")
    )
    paymentMethod = serializers.ChoiceField(
        choices=PaymentMethod.choices, required=False, default=PaymentMethod.PAYSTACK
    )
    email = serializers.EmailField(required=False)

    def to_dto(self) -> CreateOrderDTO:
        data = self.validated_data
        address = data["shippingAddress"]
        return CreateOrderDTO(
            items=[
                OrderItemDTO(
                    name=item["name"],
                    quantity=item["qty"],
                    unit_price=item["price"],
                    image=item["image"],
                    product_ref=item["product"],
                )
                for item in data["orderItems"]
            ],
            shipping_address=ShippingAddressDTO(
                address=address["address"],
                city=address["city"],
                postal_code=address["postalCode"],
                country=address["country"],
            ),
            total_price=data["totalPrice"],
            payment_method=data["paymentMethod"],
            email=data.get("email"),
        )


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.CharField(max_length=20)


class PaystackWebhookSerializer(serializers.Serializer):
    """Only the fields the reconciliation needs; the rest is ignored."""

    event = serializers.CharField()
    data = serializers.DictField()


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.ModelSerializer):
    qty = serializers.IntegerField(source="quantity")
    price = serializers.DecimalField(source="unit_price", max_digits=12, decimal_places=2)
    product = serializers.CharField(source="product_ref")

    class Meta:
        model = OrderItem
        fields = ["id", "name", "qty", "price", "image", "product"]
        read_only_fields = fields


class ShippingAddressOutputSerializer(serializers.Serializer):
    address = serializers.CharField(source="shipping_address")
    city = serializers.CharField(source="shipping_city")
    postalCode = serializers.CharField(source="shipping_postal_code")
    country = serializers.CharField(source="shipping_country")


class PaymentResultSerializer(serializers.Serializer):
    id = serializers.CharField(source="payment_provider_id")
    status = serializers.CharField(source="payment_provider_status")
    reference = serializers.CharField(source="payment_reference")
    amount = serializers.IntegerField(source="payment_amount")
    currency = serializers.CharField(source="payment_currency")


class DeliveryDetailsSerializer(serializers.Serializer):
    courier = serializers.CharField()
    trackingNumber = serializers.CharField(source="tracking_number")
    estimatedDelivery = serializers.DateTimeField(source="estimated_delivery")


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for an order with items, payment and delivery."""

    user = serializers.UUIDField(source="owner_id", read_only=True)
    email = serializers.EmailField(source="customer_email", read_only=True)
    orderItems = OrderItemSerializer(source="items", many=True, read_only=True)
    shippingAddress = ShippingAddressOutputSerializer(source="*", read_only=True)
    paymentMethod = serializers.CharField(source="payment_method", read_only=True)
    paymentResult = serializers.SerializerMethodField()
    totalPrice = serializers.DecimalField(
        source="total_price", max_digits=12, decimal_places=2, read_only=True
    )
    orderStatus = serializers.CharField(source="order_status", read_only=True)
    isPaid = serializers.BooleanField(source="is_paid", read_only=True)
    paidAt = serializers.DateTimeField(source="paid_at", read_only=True)
    isDelivered = serializers.BooleanField(source="is_delivered", read_only=True)
    deliveredAt = serializers.DateTimeField(source="delivered_at", read_only=True)
    cancelledAt = serializers.DateTimeField(source="cancelled_at", read_only=True)
    deliveryDetails = DeliveryDetailsSerializer(source="*", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "user",
            "email",
            "orderItems",
            "shippingAddress",
            "paymentMethod",
            "paymentResult",
            "totalPrice",
            "orderStatus",
            "isPaid",
            "paidAt",
            "isDelivered",
            "deliveredAt",
            "cancelledAt",
            "deliveryDetails",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields

    def get_paymentResult(self, obj: Order) -> Optional[dict[str, Any]]:
        if not obj.payment_reference:
            return None
        return PaymentResultSerializer(obj).data


class OrderOwnerSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    email = serializers.EmailField()
    phoneNumber = serializers.CharField(source="phone_number")


class AdminOrderSerializer(OrderSerializer):
    """Admin listing variant: ``user`` expands to the owner's contact card."""

    user = OrderOwnerSerializer(source="owner", read_only=True)
