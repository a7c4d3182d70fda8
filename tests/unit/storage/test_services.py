"""StorageService against the Django repositories."""

from __future__ import annotations

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.exceptions import IllegalTransitionError, OrderNotFound
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.storage.dtos import CreateDrawerDTO
from modules.storage.exceptions import DrawerAlreadyExists, DrawerNotEmpty, DrawerNotFound
from modules.storage.models import StorageDrawer
from modules.storage.repositories.django_repository import DrawerDjangoRepository
from modules.storage.services import StorageService

pytestmark = pytest.mark.unit


@pytest.fixture()
def service():
    return StorageService(
        order_repository=OrderDjangoRepository(),
        drawer_repository=DrawerDjangoRepository(),
    )


class TestSuggestForOrder:
    def test_prefers_drawer_holding_client_packages(
        self, service, drawers, make_order, client_record, other_client_record
    ):
        make_order(status=OrderStatus.STORED, storage_location="B-01")
        make_order(
            status=OrderStatus.STORED, storage_location="A-01", client=other_client_record
        )
        order = make_order(status=OrderStatus.ARRIVED_AT_OFFICE)

        suggestion = service.suggest_for_order(str(order.id))

        assert suggestion.drawer == "B"
        assert suggestion.location == "B-02"

    def test_only_for_orders_arrived_at_office(self, service, drawers, make_order):
        order = make_order(status=OrderStatus.IN_TRANSIT)

        with pytest.raises(IllegalTransitionError):
            service.suggest_for_order(str(order.id))

    def test_unknown_order(self, service, drawers):
        with pytest.raises(OrderNotFound):
            service.suggest_for_order("00000000-0000-0000-0000-000000000000")


class TestDrawers:
    def test_create_defaults_capacity_to_grid(self, service):
        drawer = service.create_drawer(CreateDrawerDTO(name="c", rows=3, columns=4))

        assert drawer.name == "C"
        assert drawer.capacity == 12

    def test_duplicate_name(self, service, drawers):
        with pytest.raises(DrawerAlreadyExists):
            service.create_drawer(CreateDrawerDTO(name="A"))

    def test_delete_refuses_occupied_drawer(self, service, drawers, make_order):
        make_order(status=OrderStatus.STORED, storage_location="A-02")

        with pytest.raises(DrawerNotEmpty):
            service.delete_drawer(str(drawers[0].id))

    def test_delete_empty_drawer(self, service, drawers):
        service.delete_drawer(str(drawers[1].id))
        assert not StorageDrawer.objects.filter(name="B").exists()

    def test_delete_unknown(self, service):
        with pytest.raises(DrawerNotFound):
            service.delete_drawer("00000000-0000-0000-0000-000000000000")

    def test_slot_status(self, service, drawers, make_order):
        make_order(status=OrderStatus.STORED, storage_location="A-02")

        assert not service.is_slot_free("A-02")
        assert service.is_slot_free("A-03")


def test_drawer_name_rejects_dash():
    with pytest.raises(ValueError):
        CreateDrawerDTO(name="A-1")
