from __future__ import annotations

import random
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.utils import timezone

from modules.clients.models import Client, Gender
from modules.orders.constants import FORWARD_SEQUENCE, OrderStatus
from modules.orders.dtos import CreateOrderDTO
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderStatusService
from modules.storage.models import StorageDrawer
from shared.infrastructure.bus import InMemoryEventBus

SEED_USER = "admin"


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users_created = self._seed_users()
        clients = self._seed_clients()
        drawers = self._seed_drawers()
        orders_created = self._seed_orders(clients)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"clients={len(clients)}, "
                f"drawers={len(drawers)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        if not User.objects.filter(username="clerk").exists():
            User.objects.create_user("clerk", password="clerk123")
            created += 1
        return created

    def _seed_clients(self) -> list[Client]:
        self.stdout.write("Creating clients...")
        clients: list[Client] = []
        seed_clients = [
            ("Aicha Mint Ahmed", "+22236001001", Gender.FEMALE),
            ("Mohamed Ould Sidi", "+22236001002", Gender.MALE),
            ("Fatimetou Mint Cheikh", "+22236001003", Gender.FEMALE),
            ("Sidi Mohamed Ould Bah", "+22236001004", Gender.MALE),
            ("Mariem Mint Moctar", "+22236001005", Gender.FEMALE),
            ("Ahmedou Ould Salem", "+22236001006", Gender.MALE),
        ]
        for name, phone, gender in seed_clients:
            client, _ = Client.objects.get_or_create(
                phone=phone,
                defaults={"name": name, "gender": gender, "address": "Nouakchott"},
            )
            clients.append(client)
        self.stdout.write(self.style.SUCCESS("Creating clients... Done!"))
        return clients

    def _seed_drawers(self) -> list[StorageDrawer]:
        self.stdout.write("Creating drawers...")
        drawers: list[StorageDrawer] = []
        for position, name in enumerate(["A", "B", "C", "D"]):
            drawer, _ = StorageDrawer.objects.get_or_create(
                name=name,
                defaults={"rows": 3, "columns": 4, "capacity": 12, "position": position},
            )
            drawers.append(drawer)
        self.stdout.write(self.style.SUCCESS("Creating drawers... Done!"))
        return drawers

    def _seed_orders(self, clients: list[Client]) -> int:
        self.stdout.write("Creating orders...")
        if not clients:
            self.stdout.write(self.style.WARNING("Skipping orders (no clients)."))
            return 0

        # A private bus keeps seeding out of the activity log.
        service = OrderStatusService(
            order_repository=OrderDjangoRepository(),
            event_bus=InMemoryEventBus(),
        )
        stored_slots = 0
        orders_created = 0
        for i in range(30):
            client = random.choice(clients)
            order = service.create_order(
                CreateOrderDTO(
                    client_id=client.id,
                    store=random.choice(["Shein", "AliExpress", "Amazon"]),
                    price=Decimal(random.randint(20, 300)),
                    currency="USD",
                    currency_rate=Decimal("39.5"),
                    quantity=random.randint(1, 4),
                    order_date=timezone.localdate() - timedelta(days=random.randint(0, 40)),
                    notes=f"Seed order {i + 1}",
                ),
                user=SEED_USER,
            )
            orders_created += 1

            target = random.choice(FORWARD_SEQUENCE)
            while order.status != target and order.status != OrderStatus.COMPLETED:
                if order.status == OrderStatus.ARRIVED_AT_OFFICE:
                    stored_slots += 1
                    drawer = "ABCD"[(stored_slots - 1) // 12 % 4]
                    slot = (stored_slots - 1) % 12 + 1
                    location = f"{drawer}-{slot:02d}"
                else:
                    location = order.storage_location
                order = service.advance(
                    order.id,
                    {
                        "global_order_id": f"GL-{100000 + i}",
                        "origin_center": "Dubai",
                        "receiving_company_id": "RC-01",
                        "tracking_number": f"TRK{random.randint(10**8, 10**9)}",
                        "arrival_date_at_office": timezone.localdate(),
                        "weight": str(round(random.uniform(0.3, 6.0), 2)),
                        "storage_location": location,
                    },
                    user=SEED_USER,
                )

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return orders_created
