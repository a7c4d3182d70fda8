"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.  Advance and edit payloads are not
serialized here: ``form_input`` flattens the request body and the DTO
parsers validate it.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping

from django.http import QueryDict
from rest_framework import serializers

from modules.orders import financials
from modules.orders.constants import CommissionType, ShippingType
from modules.orders.exceptions import ValidationError
from modules.orders.models import Order, OrderActivity

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


def form_input(data: Any, list_fields: Iterable[str] = ()) -> Dict[str, Any]:
    """Plain dict from a JSON, form or multipart request body.

    Form bodies arrive as a ``QueryDict`` holding a list per key: scalars
    keep the last value and *list_fields* keep every value.
    """
    if isinstance(data, QueryDict):
        flat = data.dict()
        for name in list_fields:
            if name in data:
                flat[name] = data.getlist(name)
        return flat
    if not isinstance(data, Mapping):
        raise ValidationError("Request body must be an object.")
    return dict(data)


class CreateOrderSerializer(serializers.Serializer):
    """Validates the order creation request payload."""

    client_id = serializers.UUIDField()
    local_order_id = serializers.CharField(required=False, allow_blank=True, max_length=40)
    global_order_id = serializers.CharField(required=False, default="", allow_blank=True)
    store = serializers.CharField(required=False, default="", allow_blank=True)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, default=0)
    currency = serializers.CharField(required=False, default="MRU", max_length=8)
    currency_rate = serializers.DecimalField(
        max_digits=12, decimal_places=4, required=False, default=1
    )
    price_in_mru = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True, default=None
    )
    commission_type = serializers.ChoiceField(
        choices=CommissionType.choices, required=False, default=CommissionType.PERCENTAGE
    )
    commission_rate = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, allow_null=True, default=None
    )
    commission = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, default=0
    )
    quantity = serializers.IntegerField(min_value=1, required=False, default=1)
    amount_paid = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, default=0
    )
    payment_method = serializers.CharField(required=False, default="", allow_blank=True)
    shipping_type = serializers.ChoiceField(
        choices=ShippingType.choices, required=False, default=ShippingType.NORMAL
    )
    order_date = serializers.DateField(required=False, allow_null=True, default=None)
    expected_arrival_date = serializers.DateField(
        required=False, allow_null=True, default=None
    )
    product_links = serializers.ListField(
        child=serializers.CharField(), required=False, default=list
    )
    product_images = serializers.ListField(
        child=serializers.CharField(), required=False, default=list
    )
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class SplitOrderSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)
    tracking_number = serializers.CharField()
    global_order_id = serializers.CharField(required=False, default="", allow_blank=True)
    price_adjustment = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, default=0
    )


class CancelOrderSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, default="", allow_blank=True)


class RevertOrderSerializer(serializers.Serializer):
    """``proof`` is a re-auth token from ``POST /api/v1/auth/reauth/``."""

    proof = serializers.CharField(required=False, default="", allow_blank=True)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderActivitySerializer(serializers.ModelSerializer):
    """Read serializer for order history entries."""

    class Meta:
        model = OrderActivity
        fields = ["timestamp", "activity", "user"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested history and derived amounts."""

    client_name = serializers.CharField(source="client.name", read_only=True)
    history = OrderActivitySerializer(many=True, read_only=True)
    next_status = serializers.CharField(read_only=True, allow_null=True)
    grand_total = serializers.SerializerMethodField()
    remaining = serializers.SerializerMethodField()
    payment_status = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "local_order_id",
            "global_order_id",
            "client_id",
            "client_name",
            "store",
            "status",
            "next_status",
            "price",
            "currency",
            "price_in_mru",
            "commission",
            "commission_type",
            "commission_rate",
            "quantity",
            "amount_paid",
            "payment_method",
            "shipping_type",
            "shipping_cost",
            "weight",
            "tracking_number",
            "origin_center",
            "receiving_company_id",
            "shipment_id",
            "box_id",
            "storage_location",
            "storage_date",
            "withdrawal_date",
            "order_date",
            "expected_arrival_date",
            "arrival_date_at_office",
            "product_links",
            "product_images",
            "order_images",
            "hub_arrival_images",
            "weighing_images",
            "receipt_images",
            "notes",
            "is_invoice_printed",
            "grand_total",
            "remaining",
            "payment_status",
            "history",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_grand_total(self, obj: Order) -> str:
        return str(financials.grand_total(obj))

    def get_remaining(self, obj: Order) -> str:
        return str(financials.remaining(obj))

    def get_payment_status(self, obj: Order) -> str:
        return financials.payment_status(obj)


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order list (no nested history)."""

    client_name = serializers.CharField(source="client.name", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "local_order_id",
            "global_order_id",
            "client_id",
            "client_name",
            "status",
            "quantity",
            "price_in_mru",
            "tracking_number",
            "shipment_id",
            "storage_location",
            "order_date",
            "created_at",
        ]
        read_only_fields = fields
