from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import uuid6
from django.db import migrations, models

ORDER_STATUS_CHOICES = [
    ("new", "New"),
    ("ordered", "Ordered"),
    ("shipped_from_store", "Shipped from store"),
    ("arrived_at_hub", "Arrived at hub"),
    ("in_transit", "In transit"),
    ("arrived_at_office", "Arrived at office"),
    ("stored", "Stored"),
    ("completed", "Completed"),
    ("cancelled", "Cancelled"),
]


def money(**kwargs):
    return models.DecimalField(
        decimal_places=2, default=Decimal("0.00"), max_digits=12, **kwargs
    )


def text(max_length):
    return models.CharField(blank=True, default="", max_length=max_length)


def image_list():
    return models.JSONField(blank=True, default=list)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("clients", "0001_initial"),
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
                ("local_order_id", models.CharField(max_length=40, unique=True)),
                ("global_order_id", text(120)),
                ("store", text(120)),
                (
                    "status",
                    models.CharField(
                        choices=ORDER_STATUS_CHOICES, default="new", max_length=24
                    ),
                ),
                ("price", money()),
                ("currency", models.CharField(default="MRU", max_length=8)),
                ("price_in_mru", money()),
                ("commission", money()),
                (
                    "commission_type",
                    models.CharField(
                        choices=[("percentage", "Percentage"), ("fixed", "Fixed")],
                        default="percentage",
                        max_length=16,
                    ),
                ),
                (
                    "commission_rate",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0.00"), max_digits=5
                    ),
                ),
                (
                    "quantity",
                    models.PositiveIntegerField(
                        default=1,
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                ("amount_paid", money()),
                ("payment_method", text(40)),
                (
                    "shipping_type",
                    models.CharField(
                        choices=[("fast", "Fast"), ("normal", "Normal")],
                        default="normal",
                        max_length=8,
                    ),
                ),
                ("shipping_cost", money()),
                (
                    "weight",
                    models.DecimalField(
                        blank=True, decimal_places=3, max_digits=8, null=True
                    ),
                ),
                ("tracking_number", text(120)),
                ("origin_center", text(80)),
                ("receiving_company_id", text(80)),
                ("shipment_id", text(64)),
                ("box_id", text(64)),
                ("storage_location", text(32)),
                ("storage_date", models.DateTimeField(blank=True, null=True)),
                ("withdrawal_date", models.DateTimeField(blank=True, null=True)),
                (
                    "order_date",
                    models.DateField(default=django.utils.timezone.localdate),
                ),
                ("expected_arrival_date", models.DateField(blank=True, null=True)),
                ("arrival_date_at_office", models.DateField(blank=True, null=True)),
                ("product_links", image_list()),
                ("product_images", image_list()),
                ("order_images", image_list()),
                ("hub_arrival_images", image_list()),
                ("weighing_images", image_list()),
                ("receipt_images", image_list()),
                ("notes", models.TextField(blank=True, default="")),
                ("is_invoice_printed", models.BooleanField(default=False)),
                (
                    "client",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to="clients.client",
                    ),
                ),
            ],
            options={
                "db_table": "orders",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="orders_status_idx"),
                    models.Index(fields=["-created_at"], name="orders_created_idx"),
                    models.Index(
                        fields=["storage_location"], name="orders_location_idx"
                    ),
                    models.Index(fields=["shipment_id"], name="orders_shipment_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderActivity",
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
                ("timestamp", models.DateTimeField(default=django.utils.timezone.now)),
                ("activity", models.TextField()),
                ("user", models.CharField(default="System", max_length=150)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="history",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "db_table": "order_activities",
                "ordering": ["timestamp", "created_at"],
                "indexes": [
                    models.Index(
                        fields=["order", "timestamp"], name="order_activity_ts_idx"
                    ),
                ],
            },
        ),
    ]
