"""Splitting a NEW order into two orders."""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.orders.constants import CommissionType, OrderStatus
from modules.orders.dtos import SplitOrderDTO
from modules.orders.exceptions import IllegalTransitionError, ValidationError
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderStatusService
from shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.unit


@pytest.fixture()
def service():
    return OrderStatusService(
        order_repository=OrderDjangoRepository(),
        reauthenticator=None,
        event_bus=InMemoryEventBus(),
    )


@pytest.fixture()
def order(make_order):
    return make_order(
        local_order_id="FCD1500",
        quantity=3,
        price_in_mru=Decimal("300"),
        commission_rate=Decimal("10"),
        commission=Decimal("30"),
        amount_paid=Decimal("150"),
        store="Shein",
        notes="gift",
    )


def test_split_moves_items_and_amounts(service, order):
    original, created = service.split(
        order.id,
        SplitOrderDTO(quantity=1, tracking_number="TRK-B", price_adjustment=Decimal("100")),
        user="clerk",
    )

    assert original.quantity == 2
    assert original.price_in_mru == Decimal("200")
    assert original.commission == Decimal("20")
    assert original.status == OrderStatus.NEW

    assert created.local_order_id == "FCD1500-S"
    assert created.quantity == 1
    assert created.price_in_mru == Decimal("100")
    assert created.commission == Decimal("10")
    assert created.tracking_number == "TRK-B"
    assert created.status == OrderStatus.NEW
    assert created.client_id == order.client_id
    assert created.store == "Shein"
    assert created.notes == "gift"
    assert created.amount_paid == Decimal("0")


def test_split_records_history_on_both_orders(service, order):
    original, created = service.split(
        order.id, SplitOrderDTO(quantity=1, tracking_number="TRK-B"), user="clerk"
    )

    assert original.history.last().activity == "Split Order. Moved 1 items to FCD1500-S."
    assert [h.activity for h in created.history.all()] == ["Created as split from FCD1500"]


def test_second_split_gets_numbered_suffix(service, order):
    service.split(order.id, SplitOrderDTO(quantity=1, tracking_number="T1"))
    _, created = service.split(order.id, SplitOrderDTO(quantity=1, tracking_number="T2"))

    assert created.local_order_id == "FCD1500-S2"
    assert Order.objects.get(id=order.id).quantity == 1


def test_fixed_commission_is_apportioned(service, make_order):
    order = make_order(
        quantity=4,
        commission_type=CommissionType.FIXED,
        commission=Decimal("100"),
        price_in_mru=Decimal("400"),
    )

    original, created = service.split(
        order.id, SplitOrderDTO(quantity=1, tracking_number="T1", price_adjustment=Decimal("100"))
    )

    assert original.commission == Decimal("75")
    assert created.commission == Decimal("25")


def test_split_after_ordered_is_refused(service, make_order):
    order = make_order(status=OrderStatus.ORDERED, quantity=3)

    with pytest.raises(IllegalTransitionError):
        service.split(order.id, SplitOrderDTO(quantity=1, tracking_number="T1"))

    assert Order.objects.count() == 1


def test_price_adjustment_above_price_is_refused(service, order):
    with pytest.raises(ValidationError) as exc_info:
        service.split(
            order.id,
            SplitOrderDTO(quantity=1, tracking_number="T1", price_adjustment=Decimal("500")),
        )

    assert exc_info.value.missing_fields == ("price_adjustment",)
    stored = Order.objects.get(id=order.id)
    assert stored.quantity == 3
    assert stored.price_in_mru == Decimal("300")
    assert Order.objects.count() == 1
