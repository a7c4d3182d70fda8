"""Order and OrderActivity models.

Business rules implemented:
- Orders move along a single forward sequence; the engine in
  ``services.py`` is the only writer of ``status``.
- Every state-changing operation appends exactly one history entry.
- History is append-only and ordered by timestamp.
- ``local_order_id`` is the human-readable identifier shown to staff and
  clients (``FCD1001``, ``FCD1001-S``).
- Client FK uses PROTECT to preserve financial and storage history.
- ``storage_location`` is a slot address ``<drawer>-<NN>`` once stored.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel
from modules.orders.constants import (
    BATCH_RESTRICTED_STATES,
    FORWARD_SEQUENCE,
    NEXT_STATUS,
    TERMINAL_STATES,
    CommissionType,
    OrderStatus,
    ShippingType,
)


class Order(BaseModel):
    """Order aggregate root.

    Money fields are stored in the local currency (MRU) except ``price``,
    which keeps the amount in the store's ``currency``.  ``weight`` is only
    known once the package is weighed at the office.
    """

    local_order_id: models.CharField = models.CharField(max_length=40, unique=True)
    global_order_id: models.CharField = models.CharField(
        max_length=120, blank=True, default=""
    )
    client: models.ForeignKey = models.ForeignKey(
        "clients.Client",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    store: models.CharField = models.CharField(max_length=120, blank=True, default="")
    status: models.CharField = models.CharField(
        max_length=24,
        choices=OrderStatus.choices,
        default=OrderStatus.NEW,
    )

    # Commercial
    price: models.DecimalField = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    currency: models.CharField = models.CharField(max_length=8, default="MRU")
    price_in_mru: models.DecimalField = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    commission: models.DecimalField = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    commission_type: models.CharField = models.CharField(
        max_length=16,
        choices=CommissionType.choices,
        default=CommissionType.PERCENTAGE,
    )
    commission_rate: models.DecimalField = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("0.00")
    )
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        default=1, validators=[MinValueValidator(1)]
    )
    amount_paid: models.DecimalField = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    payment_method: models.CharField = models.CharField(
        max_length=40, blank=True, default=""
    )

    # Shipping
    shipping_type: models.CharField = models.CharField(
        max_length=8, choices=ShippingType.choices, default=ShippingType.NORMAL
    )
    shipping_cost: models.DecimalField = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    weight: models.DecimalField = models.DecimalField(
        max_digits=8, decimal_places=3, null=True, blank=True
    )
    tracking_number: models.CharField = models.CharField(
        max_length=120, blank=True, default=""
    )
    origin_center: models.CharField = models.CharField(
        max_length=80, blank=True, default=""
    )
    receiving_company_id: models.CharField = models.CharField(
        max_length=80, blank=True, default=""
    )
    shipment_id: models.CharField = models.CharField(
        max_length=64, blank=True, default=""
    )
    box_id: models.CharField = models.CharField(max_length=64, blank=True, default="")

    # Storage and pickup
    storage_location: models.CharField = models.CharField(
        max_length=32, blank=True, default=""
    )
    storage_date: models.DateTimeField = models.DateTimeField(null=True, blank=True)
    withdrawal_date: models.DateTimeField = models.DateTimeField(null=True, blank=True)

    # Dates
    order_date: models.DateField = models.DateField(default=timezone.localdate)
    expected_arrival_date: models.DateField = models.DateField(null=True, blank=True)
    arrival_date_at_office: models.DateField = models.DateField(null=True, blank=True)

    # Attachments (URLs)
    product_links: models.JSONField = models.JSONField(default=list, blank=True)
    product_images: models.JSONField = models.JSONField(default=list, blank=True)
    order_images: models.JSONField = models.JSONField(default=list, blank=True)
    hub_arrival_images: models.JSONField = models.JSONField(default=list, blank=True)
    weighing_images: models.JSONField = models.JSONField(default=list, blank=True)
    receipt_images: models.JSONField = models.JSONField(default=list, blank=True)

    notes: models.TextField = models.TextField(blank=True, default="")
    is_invoice_printed: models.BooleanField = models.BooleanField(default=False)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
            models.Index(fields=["storage_location"], name="orders_location_idx"),
            models.Index(fields=["shipment_id"], name="orders_shipment_idx"),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        """Return ``True`` if the order is in a terminal state."""
        return self.status in TERMINAL_STATES

    @property
    def next_status(self) -> str | None:
        return NEXT_STATUS.get(self.status)

    @property
    def previous_status(self) -> str | None:
        if self.status not in FORWARD_SEQUENCE:
            return None
        index = FORWARD_SEQUENCE.index(self.status)
        return FORWARD_SEQUENCE[index - 1] if index > 0 else None

    @property
    def is_batch_managed(self) -> bool:
        """``True`` while an external shipment drives this order's status."""
        return bool(self.shipment_id) and self.status in BATCH_RESTRICTED_STATES

    def __str__(self) -> str:
        return f"{self.local_order_id} ({self.status})"


class OrderActivity(BaseModel):
    """Append-only history entry of an order.

    ``user`` is the display name of the acting staff member (``"System"``
    for automated changes).  It is stored as text so history survives
    user deletion.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="history",
    )
    timestamp: models.DateTimeField = models.DateTimeField(default=timezone.now)
    activity: models.TextField = models.TextField()
    user: models.CharField = models.CharField(max_length=150, default="System")

    class Meta:
        db_table = "order_activities"
        ordering = ["timestamp", "created_at"]
        indexes = [
            models.Index(fields=["order", "timestamp"], name="order_activity_ts_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.order_id} @ {self.timestamp:%Y-%m-%d %H:%M}: {self.activity}"
