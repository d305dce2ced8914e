import django.core.validators
import django.db.models.deletion
import uuid6
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid6.uuid7,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("customer_email", models.EmailField(max_length=254)),
                ("shipping_address", models.CharField(max_length=255)),
                ("shipping_city", models.CharField(max_length=100)),
                ("shipping_postal_code", models.CharField(max_length=20)),
                ("shipping_country", models.CharField(max_length=100)),
                (
                    "payment_method",
                    models.CharField(
                        choices=[
                            ("Paystack", "Paystack"),
                            ("Flutterwave", "Flutterwave"),
                            ("Stripe", "Stripe"),
                            ("PayPal", "PayPal"),
                            ("CashOnDelivery", "Cash on delivery"),
                        ],
                        default="Paystack",
                        max_length=20,
                    ),
                ),
                (
                    "total_price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                ("payment_provider_id", models.CharField(blank=True, default="", max_length=100)),
                ("payment_provider_status", models.CharField(blank=True, default="", max_length=50)),
                (
                    "payment_reference",
                    models.CharField(blank=True, db_index=True, default="", max_length=100),
                ),
                ("payment_amount", models.PositiveBigIntegerField(blank=True, null=True)),
                ("payment_currency", models.CharField(default="NGN", max_length=3)),
                (
                    "order_status",
                    models.CharField(
                        choices=[
                            ("Processing", "Processing"),
                            ("Shipped", "Shipped"),
                            ("Delivered", "Delivered"),
                            ("Cancelled", "Cancelled"),
                        ],
                        default="Processing",
                        max_length=20,
                    ),
                ),
                ("is_paid", models.BooleanField(default=False)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("is_delivered", models.BooleanField(default=False)),
                ("delivered_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("courier", models.CharField(default="Not Assigned", max_length=100)),
                ("tracking_number", models.CharField(blank=True, default="", max_length=50)),
                ("estimated_delivery", models.DateTimeField(blank=True, null=True)),
                (
                    "owner",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="orders",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "orders",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["order_status"], name="orders_status_idx"),
                    models.Index(fields=["-created_at"], name="orders_created_idx"),
                    models.Index(
                        fields=["owner", "-created_at"], name="orders_owner_created_idx"
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            order_status__in=["Processing", "Shipped", "Delivered", "Cancelled"]
                        ),
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
                                order_status="Delivered",
                                is_delivered=True,
                                delivered_at__isnull=False,
                            )
                            | (
                                ~models.Q(order_status="Delivered")
                                & models.Q(is_delivered=False, delivered_at__isnull=True)
                            )
                        ),
                        name="orders_delivery_consistent",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid6.uuid7,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                (
                    "quantity",
                    models.PositiveIntegerField(
                        validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                (
                    "unit_price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "image",
                    models.CharField(
                        default="https://via.placeholder.com/300x300.png?text=No+Image",
                        max_length=500,
                    ),
                ),
                ("product_ref", models.CharField(max_length=64)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "db_table": "order_items",
                "ordering": ["created_at", "id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(quantity__gte=1),
                        name="order_items_quantity_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(unit_price__gte=0),
                        name="order_items_unit_price_non_negative",
                    ),
                ],
            },
        ),
    ]
