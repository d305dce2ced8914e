"""Order API views.

Exposes the ``OrderService`` via HTTP using a DRF ViewSet.  Views only
translate HTTP into service calls: authorization lives in the service
(via ``modules.accounts.policies``) and domain exceptions are rendered by
``modules.core.exceptions.api_exception_handler``.
"""

from __future__ import annotations

import json

import structlog
from django.conf import settings
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.accounts.policies import require_authenticated, require_optional_authenticated
from modules.core.exceptions import AuthenticationError, ValidationError
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    AdminOrderSerializer,
    CreateOrderSerializer,
    OrderSerializer,
    OrderStatusUpdateSerializer,
    PaystackWebhookSerializer,
)
from modules.orders.services import OrderService
from modules.payments.apps import get_payment_gateway
from modules.payments.paystack import SIGNATURE_HEADER, verify_webhook_signature

logger = structlog.get_logger(__name__)

CHARGE_SUCCESS_EVENT = "charge.success"


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with an injected repository and gateway (DIP).
    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.

    ``AllowAny`` because checkout may be anonymous and the Paystack
    callbacks carry no user token; every other action authenticates
    explicitly.
    """

    queryset = Order.objects.all()
    permission_classes = [AllowAny]
    filterset_class = OrderFilter
    ordering_fields = ["created_at", "total_price", "order_status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            payment_gateway=get_payment_gateway(),
        )

    def get_throttles(self) -> list[BaseThrottle]:
        """Scope throttling per action."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"verify_payment", "paystack_webhook"}:
            throttle_scope = "payment_verification"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Checkout & payment
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/

        Persists an unpaid order and returns the Paystack checkout URL.
        """
        actor = require_optional_authenticated(request)
        if actor is None and not settings.ORDERS_ALLOW_GUEST_CHECKOUT:
            raise AuthenticationError("Not authorized, no token provided.")

        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = self._service.create_order(actor, serializer.to_dto())
        return Response(
            {
                "orderId": str(result.order.id),
                "authorization_url": result.payment.authorization_url,
                "reference": result.payment.reference,
                "message": "Payment initialized successfully",
            },
            status=status.HTTP_201_CREATED,
        )

    @action(
        detail=False,
        methods=["get"],
        url_path=r"paystack/verify/(?P<reference>[^/]+)",
    )
    def verify_payment(self, request: Request, reference: str | None = None) -> Response:
        """GET /api/v1/orders/paystack/verify/{reference}/

        Paystack redirects the customer here after checkout.
        """
        order = self._service.verify_payment(reference)
        return Response({"message": "Payment successful", "order": OrderSerializer(order).data})

    @action(detail=False, methods=["post"], url_path="paystack/webhook")
    def paystack_webhook(self, request: Request) -> Response:
        """POST /api/v1/orders/paystack/webhook/

        Server-to-server notification signed with the secret key.  Only
        ``charge.success`` is acted upon; it goes through the same
        idempotent verification as the redirect.
        """
        # The signature covers the exact bytes; read them before DRF parses.
        body = request.body
        if not verify_webhook_signature(
            body, request.headers.get(SIGNATURE_HEADER), settings.PAYSTACK_SECRET_KEY
        ):
            logger.warning("paystack.webhook_rejected", reason="invalid signature")
            raise AuthenticationError("Invalid webhook signature.")

        try:
            payload = json.loads(body or b"{}")
        except ValueError as exc:
            raise ValidationError("Webhook body is not valid JSON.") from exc

        serializer = PaystackWebhookSerializer(data=payload)
        serializer.is_valid(raise_exception=True)
        event = serializer.validated_data["event"]
        if event != CHARGE_SUCCESS_EVENT:
            logger.info("paystack.webhook_ignored", paystack_event=event)
            return Response({"message": "Event ignored"})

        reference = serializer.validated_data["data"].get("reference")
        if not reference:
            raise ValidationError("Webhook payload has no transaction reference.")

        order = self._service.verify_payment(str(reference))
        return Response({"message": "Payment successful", "orderId": str(order.id)})

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @action(detail=False, methods=["get"])
    def myorders(self, request: Request) -> Response:
        """GET /api/v1/orders/myorders/"""
        actor = require_authenticated(request)
        orders = self._service.list_my_orders(actor)
        return Response(OrderSerializer(orders, many=True).data)

    @action(detail=False, methods=["get"], url_path="admin")
    def admin_orders(self, request: Request) -> Response:
        """GET /api/v1/orders/admin/

        Filtering (status, is_paid, date range...) is handled by
        ``OrderFilter`` via ``filter_backends``.  Not paginated.
        """
        actor = require_authenticated(request)
        orders = self.filter_queryset(self._service.list_orders(actor))
        return Response(AdminOrderSerializer(orders, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        actor = require_authenticated(request)
        order = self._service.get_order(actor, pk)
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @action(detail=True, methods=["put"], url_path="status")
    def update_status(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/orders/{pk}/status/ (administrators only)."""
        actor = require_authenticated(request)
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = self._service.update_order_status(
            actor, pk, serializer.validated_data["status"]
        )
        return Response(
            {
                "message": f"Order updated to {order.order_status}",
                "order": OrderSerializer(order).data,
            }
        )

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/cancel/"""
        actor = require_authenticated(request)
        order = self._service.cancel_order(actor, pk)
        return Response({"message": "Order cancelled", "order": OrderSerializer(order).data})

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/orders/{pk}/ (owner, Delivered orders only)."""
        actor = require_authenticated(request)
        self._service.delete_order(actor, pk)
        return Response({"message": "Order successfully removed from user history."})
