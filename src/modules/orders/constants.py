"""Order domain constants.

Defines status choices, the forward transition table and the
per-state input requirements of the order status engine.
"""

from decimal import Decimal

from django.db import models


class OrderStatus(models.TextChoices):
    NEW = "new", "New"
    ORDERED = "ordered", "Ordered"
    SHIPPED_FROM_STORE = "shipped_from_store", "Shipped from store"
    ARRIVED_AT_HUB = "arrived_at_hub", "Arrived at hub"
    IN_TRANSIT = "in_transit", "In transit"
    ARRIVED_AT_OFFICE = "arrived_at_office", "Arrived at office"
    STORED = "stored", "Stored"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class ShippingType(models.TextChoices):
    FAST = "fast", "Fast"
    NORMAL = "normal", "Normal"


class CommissionType(models.TextChoices):
    PERCENTAGE = "percentage", "Percentage"
    FIXED = "fixed", "Fixed"


FORWARD_SEQUENCE: tuple[str, ...] = (
    OrderStatus.NEW,
    OrderStatus.ORDERED,
    OrderStatus.SHIPPED_FROM_STORE,
    OrderStatus.ARRIVED_AT_HUB,
    OrderStatus.IN_TRANSIT,
    OrderStatus.ARRIVED_AT_OFFICE,
    OrderStatus.STORED,
    OrderStatus.COMPLETED,
)

NEXT_STATUS: dict[str, str] = dict(zip(FORWARD_SEQUENCE, FORWARD_SEQUENCE[1:]))

TERMINAL_STATES: set[str] = {OrderStatus.COMPLETED, OrderStatus.CANCELLED}

CANCELLABLE_STATES: set[str] = {OrderStatus.ORDERED}

# Manual advance is refused while an external shipment manages the order.
BATCH_RESTRICTED_STATES: set[str] = {
    OrderStatus.SHIPPED_FROM_STORE,
    OrderStatus.ARRIVED_AT_HUB,
    OrderStatus.IN_TRANSIT,
}

REQUIRED_FIELDS: dict[str, tuple[str, ...]] = {
    OrderStatus.NEW: ("global_order_id", "origin_center", "receiving_company_id"),
    OrderStatus.ORDERED: ("tracking_number",),
    OrderStatus.SHIPPED_FROM_STORE: (),
    OrderStatus.ARRIVED_AT_HUB: (),
    OrderStatus.IN_TRANSIT: ("arrival_date_at_office",),
    OrderStatus.ARRIVED_AT_OFFICE: ("weight", "storage_location"),
    OrderStatus.STORED: ("storage_location",),
}

# Image list fields an advance may append to, per originating state.
ATTACHMENT_FIELDS: tuple[str, ...] = (
    "order_images",
    "hub_arrival_images",
    "weighing_images",
    "receipt_images",
)

# Fields owned by advance/revert/cancel; a details edit may not touch them.
LIFECYCLE_FIELDS: tuple[str, ...] = (
    "status",
    "local_order_id",
    "shipment_id",
    "storage_location",
    "storage_date",
    "withdrawal_date",
    "weight",
    "shipping_cost",
    "arrival_date_at_office",
    *ATTACHMENT_FIELDS,
)

DEFAULT_SHIPPING_RATES: dict[str, Decimal] = {
    ShippingType.FAST: Decimal("450"),
    ShippingType.NORMAL: Decimal("280"),
}

SYSTEM_USER = "System"

SPLIT_SUFFIX = "-S"

LOCAL_ORDER_ID_START = 1001
