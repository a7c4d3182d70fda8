"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``*AdvancePayload``: per-status input for a forward transition,
  discriminated by ``status`` (the state the order is leaving).
- ``CreateOrderDTO`` / ``SplitOrderDTO`` / ``UpdateOrderDTO``: creation, split and
  details-edit requests.
- ``ActivityEntryDTO``: one history line.
- ``OrderSnapshot``: immutable view of an order consumed by the reducer.
- ``InvoiceDTO`` / ``BillingSummaryDTO``: financial read models.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import (
    TYPE_CHECKING,
    Annotated,
    Any,
    ClassVar,
    Dict,
    List,
    Literal,
    Mapping,
    Optional,
    Tuple,
    Union,
)
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic import ValidationError as PydanticValidationError

from modules.orders.constants import LIFECYCLE_FIELDS, REQUIRED_FIELDS, OrderStatus
from modules.orders.exceptions import IllegalTransitionError, ValidationError

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderActivity

NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
ShippingTypeLiteral = Literal["fast", "normal"]
CommissionTypeLiteral = Literal["percentage", "fixed"]
ImageList = Tuple[str, ...]


# ---------------------------------------------------------------------------
# Advance payloads
# ---------------------------------------------------------------------------


class _AdvancePayload(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    attachment_fields: ClassVar[Tuple[str, ...]] = ()

    def changes(self) -> Dict[str, Any]:
        """Scalar order fields this advance sets."""
        excluded = {"status", *self.attachment_fields}
        return {
            name: getattr(self, name)
            for name in type(self).model_fields
            if name not in excluded and getattr(self, name) is not None
        }

    def attachments(self) -> Dict[str, ImageList]:
        """Image URLs to append, keyed by order field."""
        return {
            name: getattr(self, name)
            for name in self.attachment_fields
            if getattr(self, name)
        }


class NewOrderAdvancePayload(_AdvancePayload):
    attachment_fields = ("order_images",)

    status: Literal["new"] = "new"
    global_order_id: NonBlankStr
    origin_center: NonBlankStr
    receiving_company_id: NonBlankStr
    order_images: ImageList = ()


class OrderedAdvancePayload(_AdvancePayload):
    status: Literal["ordered"] = "ordered"
    tracking_number: NonBlankStr


class ShippedFromStoreAdvancePayload(_AdvancePayload):
    attachment_fields = ("hub_arrival_images",)

    status: Literal["shipped_from_store"] = "shipped_from_store"
    hub_arrival_images: ImageList = ()


class ArrivedAtHubAdvancePayload(_AdvancePayload):
    status: Literal["arrived_at_hub"] = "arrived_at_hub"


class InTransitAdvancePayload(_AdvancePayload):
    status: Literal["in_transit"] = "in_transit"
    arrival_date_at_office: date


class ArrivedAtOfficeAdvancePayload(_AdvancePayload):
    attachment_fields = ("weighing_images",)

    status: Literal["arrived_at_office"] = "arrived_at_office"
    weight: Decimal = Field(gt=0)
    storage_location: NonBlankStr
    shipping_type: Optional[ShippingTypeLiteral] = None
    weighing_images: ImageList = ()


class StoredAdvancePayload(_AdvancePayload):
    attachment_fields = ("receipt_images",)

    status: Literal["stored"] = "stored"
    storage_location: NonBlankStr
    receipt_images: ImageList = ()


AdvancePayload = Annotated[
    Union[
        NewOrderAdvancePayload,
        OrderedAdvancePayload,
        ShippedFromStoreAdvancePayload,
        ArrivedAtHubAdvancePayload,
        InTransitAdvancePayload,
        ArrivedAtOfficeAdvancePayload,
        StoredAdvancePayload,
    ],
    Field(discriminator="status"),
]

PAYLOAD_TYPES: Dict[str, type[_AdvancePayload]] = {
    OrderStatus.NEW: NewOrderAdvancePayload,
    OrderStatus.ORDERED: OrderedAdvancePayload,
    OrderStatus.SHIPPED_FROM_STORE: ShippedFromStoreAdvancePayload,
    OrderStatus.ARRIVED_AT_HUB: ArrivedAtHubAdvancePayload,
    OrderStatus.IN_TRANSIT: InTransitAdvancePayload,
    OrderStatus.ARRIVED_AT_OFFICE: ArrivedAtOfficeAdvancePayload,
    OrderStatus.STORED: StoredAdvancePayload,
}


def parse_advance_payload(
    status: str,
    data: Mapping[str, Any],
    defaults: Optional[Mapping[str, Any]] = None,
) -> AdvancePayload:
    """Build the payload variant for an order currently in *status*.

    Blank values in *data* count as absent so that *defaults* (the values
    already on the order) can fill them.  Raises ``ValidationError`` listing
    every missing or invalid field.
    """
    payload_type = PAYLOAD_TYPES.get(status)
    if payload_type is None:
        raise IllegalTransitionError(f"Orders in '{status}' cannot be advanced.")
    declared = data.get("status") or status
    if declared != status:
        raise IllegalTransitionError(
            f"Payload is for '{declared}' but the order is '{status}'."
        )

    merged: Dict[str, Any] = {
        key: value for key, value in (defaults or {}).items() if value not in (None, "")
    }
    merged.update(
        {key: value for key, value in data.items() if value not in (None, "")}
    )
    merged["status"] = status

    try:
        return payload_type.model_validate(merged)
    except PydanticValidationError as exc:
        raise ValidationError.for_fields(_error_fields(exc)) from exc


def parse_update_payload(data: Mapping[str, Any]) -> UpdateOrderDTO:
    """Build an ``UpdateOrderDTO`` from raw edit input.

    Raises ``ValidationError`` when lifecycle fields are present or any
    value is invalid.
    """
    locked = [name for name in LIFECYCLE_FIELDS if name in data]
    if locked:
        raise ValidationError(
            f"Only lifecycle operations may change: {', '.join(locked)}.", locked
        )
    try:
        return UpdateOrderDTO.model_validate(dict(data))
    except PydanticValidationError as exc:
        fields = _error_fields(exc)
        raise ValidationError(f"Invalid fields: {', '.join(fields)}.", fields) from exc


def _error_fields(exc: PydanticValidationError) -> List[str]:
    fields: List[str] = []
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else "payload"
        if field not in fields:
            fields.append(field)
    return fields


def form_defaults(order: Order) -> Dict[str, Any]:
    """Values already on *order* for the fields its status requires."""
    return {
        name: getattr(order, name)
        for name in REQUIRED_FIELDS.get(order.status, ())
        if getattr(order, name, None) not in (None, "")
    }


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    ``local_order_id`` is generated when omitted and ``price_in_mru`` is
    derived from ``price × currency_rate``.  ``commission`` is only
    read for fixed commissions; percentage commissions are derived from
    ``commission_rate`` and ``price_in_mru``.
    """

    model_config = ConfigDict(frozen=True)

    client_id: UUID
    local_order_id: Optional[str] = None
    global_order_id: str = ""
    store: str = ""
    price: Decimal = Field(default=Decimal("0"), ge=0)
    currency: str = "MRU"
    currency_rate: Decimal = Field(default=Decimal("1"), gt=0)
    price_in_mru: Optional[Decimal] = Field(default=None, ge=0)
    commission_type: CommissionTypeLiteral = "percentage"
    commission_rate: Optional[Decimal] = Field(default=None, ge=0)
    commission: Decimal = Field(default=Decimal("0"), ge=0)
    quantity: int = Field(default=1, ge=1)
    amount_paid: Decimal = Field(default=Decimal("0"), ge=0)
    payment_method: str = ""
    shipping_type: ShippingTypeLiteral = "normal"
    order_date: Optional[date] = None
    expected_arrival_date: Optional[date] = None
    product_links: List[str] = Field(default_factory=list)
    product_images: List[str] = Field(default_factory=list)
    notes: str = ""


class SplitOrderDTO(BaseModel):
    """Immutable DTO for splitting part of a NEW order into a new order."""

    model_config = ConfigDict(frozen=True)

    quantity: int = Field(ge=1)
    tracking_number: NonBlankStr
    global_order_id: str = ""
    price_adjustment: Decimal = Field(default=Decimal("0"), ge=0)


class UpdateOrderDTO(BaseModel):
    """Immutable DTO for a direct edit of order details.

    Only the fields present in the input change (``exclude_unset``).
    Unknown keys are rejected.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    global_order_id: str = ""
    store: str = ""
    price: Decimal = Field(default=Decimal("0"), ge=0)
    currency: str = "MRU"
    price_in_mru: Decimal = Field(default=Decimal("0"), ge=0)
    commission_type: CommissionTypeLiteral = "percentage"
    commission_rate: Decimal = Field(default=Decimal("0"), ge=0)
    commission: Decimal = Field(default=Decimal("0"), ge=0)
    quantity: int = Field(default=1, ge=1)
    amount_paid: Decimal = Field(default=Decimal("0"), ge=0)
    payment_method: str = ""
    shipping_type: ShippingTypeLiteral = "normal"
    tracking_number: str = ""
    origin_center: str = ""
    receiving_company_id: str = ""
    order_date: date = Field(default_factory=date.today)
    expected_arrival_date: Optional[date] = None
    product_links: List[str] = Field(default_factory=list)
    product_images: List[str] = Field(default_factory=list)
    notes: str = ""
    is_invoice_printed: bool = False

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class ActivityEntryDTO(BaseModel):
    """Immutable DTO for one order history line."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    activity: str
    user: str

    @classmethod
    def from_entity(cls, entry: OrderActivity) -> ActivityEntryDTO:
        return cls(timestamp=entry.timestamp, activity=entry.activity, user=entry.user)


class OrderSnapshot(BaseModel):
    """Immutable state of an order, the input and output of ``apply_event``."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    local_order_id: str
    global_order_id: str = ""
    client_id: UUID
    status: str
    shipment_id: str = ""
    quantity: int = 1
    price: Decimal = Decimal("0")
    price_in_mru: Decimal = Decimal("0")
    commission: Decimal = Decimal("0")
    commission_type: str = "percentage"
    commission_rate: Decimal = Decimal("0")
    amount_paid: Decimal = Decimal("0")
    shipping_type: str = "normal"
    shipping_cost: Decimal = Decimal("0")
    weight: Optional[Decimal] = None
    tracking_number: str = ""
    origin_center: str = ""
    receiving_company_id: str = ""
    storage_location: str = ""
    storage_date: Optional[datetime] = None
    withdrawal_date: Optional[datetime] = None
    arrival_date_at_office: Optional[date] = None
    notes: str = ""
    order_images: ImageList = ()
    hub_arrival_images: ImageList = ()
    weighing_images: ImageList = ()
    receipt_images: ImageList = ()
    history: Tuple[ActivityEntryDTO, ...] = ()

    @classmethod
    def from_entity(cls, order: Order) -> OrderSnapshot:
        data = {name: getattr(order, name) for name in cls.model_fields if name != "history"}
        for name in ("order_images", "hub_arrival_images", "weighing_images", "receipt_images"):
            data[name] = tuple(data[name] or ())
        data["history"] = tuple(
            ActivityEntryDTO.from_entity(entry) for entry in order.history.all()
        )
        return cls(**data)


class InvoiceDTO(BaseModel):
    """Amounts printed on a client invoice, in MRU."""

    model_config = ConfigDict(frozen=True)

    order_id: UUID
    local_order_id: str
    client_name: str
    quantity: int
    product_total: Decimal
    commission: Decimal
    shipping_cost: Decimal
    grand_total: Decimal
    amount_paid: Decimal
    remaining: Decimal
    payment_status: str
    delivery_due: Decimal


class BillingSummaryDTO(BaseModel):
    """Totals over billable orders (everything except NEW and CANCELLED)."""

    model_config = ConfigDict(frozen=True)

    order_count: int
    total_billed: Decimal
    total_paid: Decimal
    total_outstanding: Decimal
    collection_rate: Decimal
    paid_count: int
    partial_count: int
    unpaid_count: int
