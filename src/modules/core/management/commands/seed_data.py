from __future__ import annotations

import random
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from modules.accounts.constants import Role
from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderItem
from modules.orders.state_machine import apply_transition
from modules.payments.dtos import TransactionVerification, to_minor_units

CATALOG = [
    ("prod-001", "Wireless Earbuds", Decimal("25000.00")),
    ("prod-002", "Smart Watch", Decimal("48500.00")),
    ("prod-003", "Leather Backpack", Decimal("32000.00")),
    ("prod-004", "Bluetooth Speaker", Decimal("18750.00")),
    ("prod-005", "Ankara Shirt", Decimal("12000.00")),
    ("prod-006", "Running Shoes", Decimal("41000.00")),
    ("prod-007", "Phone Case", Decimal("3500.00")),
    ("prod-008", "Power Bank 20000mAh", Decimal("15500.00")),
]

CITIES = [
    ("12 Admiralty Way", "Lagos", "106104"),
    ("4 Aminu Kano Crescent", "Abuja", "900288"),
    ("27 Ring Road", "Ibadan", "200273"),
    ("9 Aba Road", "Port Harcourt", "500272"),
]

# Target status of seeded orders, by weight; None leaves the order unpaid.
STATUS_WEIGHTS = [
    (None, 0.20),
    (OrderStatus.PROCESSING, 0.25),
    (OrderStatus.SHIPPED, 0.20),
    (OrderStatus.DELIVERED, 0.25),
    (OrderStatus.CANCELLED, 0.10),
]


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def add_arguments(self, parser):
        parser.add_argument("--orders", type=int, default=40)

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users = self._seed_users()
        orders_created = self._seed_orders(users, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                f"Seed completed: users={len(users)}, orders={orders_created}"
            )
        )

    def _seed_users(self) -> list:
        User = get_user_model()
        seed_users = [
            ("admin", "Ada Admin", "admin@example.com", Role.SUPERADMIN, "admin123"),
            ("ops", "Tunde Ops", "ops@example.com", Role.ADMIN, "ops12345"),
            ("chioma", "Chioma Eze", "chioma@example.com", Role.USER, "user1234"),
            ("bayo", "Bayo Adeyemi", "bayo@example.com", Role.USER, "user1234"),
            ("amina", "Amina Bello", "amina@example.com", Role.USER, "user1234"),
        ]
        users = []
        for username, name, email, role, password in seed_users:
            user = User.objects.filter(username=username).first()
            if user is None:
                user = User.objects.create_user(
                    username,
                    email=email,
                    password=password,
                    name=name,
                    role=role,
                    is_staff=role != Role.USER,
                    is_superuser=role == Role.SUPERADMIN,
                )
            users.append(user)
        return users

    @transaction.atomic
    def _seed_orders(self, users: list, count: int) -> int:
        self.stdout.write("Creating orders...")
        customers = [user for user in users if user.role == Role.USER]
        statuses = [status for status, _ in STATUS_WEIGHTS]
        weights = [weight for _, weight in STATUS_WEIGHTS]

        for _ in range(count):
            customer = random.choice(customers)
            address, city, postal_code = random.choice(CITIES)
            picks = random.sample(CATALOG, k=random.randint(1, 3))
            lines = [(ref, name, price, random.randint(1, 3)) for ref, name, price in picks]
            total = sum((price * qty for _, _, price, qty in lines), Decimal("0.00"))

            order = Order.objects.create(
                owner=customer,
                customer_email=customer.email,
                shipping_address=address,
                shipping_city=city,
                shipping_postal_code=postal_code,
                shipping_country="Nigeria",
                total_price=total,
            )
            OrderItem.objects.bulk_create(
                [
                    OrderItem(
                        order=order,
                        name=name,
                        quantity=qty,
                        unit_price=price,
                        product_ref=ref,
                    )
                    for ref, name, price, qty in lines
                ]
            )

            target = random.choices(statuses, weights=weights, k=1)[0]
            if target is not None:
                order.mark_as_paid(
                    TransactionVerification(
                        success=True,
                        reference=str(order.id),
                        amount=to_minor_units(total),
                        currency="NGN",
                        provider_transaction_id=str(random.randint(10**9, 10**10)),
                        provider_status="success",
                    )
                )
                if target != OrderStatus.PROCESSING:
                    apply_transition(order, target)
                order.save()

            created_at = timezone.now() - timedelta(days=random.randint(0, 30))
            Order.objects.filter(id=order.id).update(created_at=created_at)

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return count
