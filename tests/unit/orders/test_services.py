"""Unit tests for OrderStatusService with mocked dependencies.

The repository, re-authenticator and event bus are ``MagicMock`` stubs,
so these tests exercise the decision logic of the engine without
touching persistence.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.dtos import (
    ArrivedAtOfficeAdvancePayload,
    CreateOrderDTO,
    OrderedAdvancePayload,
    SplitOrderDTO,
)
from modules.orders.events import OrderAdvanced, OrderCreated, OrderUpdated
from modules.orders.exceptions import (
    AuthenticationError,
    IllegalTransitionError,
    OrderNotFound,
    PersistenceError,
    ValidationError,
)
from modules.orders.models import Order
from modules.orders.services import OrderStatusService, describe_advance

pytestmark = pytest.mark.unit


class StubHistory:
    def all(self):
        return []


class StubOrder(SimpleNamespace):
    is_terminal = Order.is_terminal
    is_batch_managed = Order.is_batch_managed


def stub_order(**overrides):
    data = {
        "id": uuid4(),
        "local_order_id": "FCD1001",
        "global_order_id": "",
        "client_id": uuid4(),
        "store": "Shein",
        "currency": "USD",
        "payment_method": "",
        "order_date": date(2026, 1, 5),
        "expected_arrival_date": None,
        "product_links": [],
        "product_images": [],
        "status": OrderStatus.NEW,
        "shipment_id": "",
        "quantity": 1,
        "price": Decimal("100"),
        "price_in_mru": Decimal("1000"),
        "commission": Decimal("100"),
        "commission_type": "percentage",
        "commission_rate": Decimal("10"),
        "amount_paid": Decimal("0"),
        "shipping_type": "normal",
        "shipping_cost": Decimal("0"),
        "weight": None,
        "tracking_number": "",
        "origin_center": "",
        "receiving_company_id": "",
        "storage_location": "",
        "storage_date": None,
        "withdrawal_date": None,
        "arrival_date_at_office": None,
        "notes": "",
        "order_images": [],
        "hub_arrival_images": [],
        "weighing_images": [],
        "receipt_images": [],
        "history": StubHistory(),
    }
    data.update(overrides)
    return StubOrder(**data)


@pytest.fixture()
def repo():
    repository = MagicMock()
    repository.local_id_exists.return_value = False
    repository.local_ids_with_prefix.return_value = []
    repository.apply_changes.side_effect = lambda order_id, fields, activity: SimpleNamespace(
        id=order_id, **fields
    )
    return repository


@pytest.fixture()
def reauth():
    return MagicMock()


@pytest.fixture()
def bus():
    return MagicMock()


@pytest.fixture()
def service(repo, reauth, bus):
    return OrderStatusService(
        order_repository=repo,
        reauthenticator=reauth,
        event_bus=bus,
        shipping_rates={"fast": Decimal("450"), "normal": Decimal("280")},
        order_id_prefix="FCD",
        default_commission_rate=Decimal("10"),
    )


class TestCreate:
    def test_derives_price_and_commission(self, service, repo, bus):
        repo.create.side_effect = lambda data, activity: SimpleNamespace(**data)

        order = service.create_order(
            CreateOrderDTO(
                client_id=uuid4(),
                price=Decimal("25"),
                currency="USD",
                currency_rate=Decimal("39.5"),
            ),
            user="clerk",
        )

        assert order.local_order_id == "FCD1001"
        assert order.status == OrderStatus.NEW
        assert order.price_in_mru == Decimal("988")
        assert order.commission == Decimal("99")
        data, activity = repo.create.call_args.args
        assert activity.activity == "Order Created"
        assert activity.user == "clerk"
        published = bus.publish.call_args.args[0]
        assert isinstance(published, OrderCreated)
        assert published.aggregate_id == data["id"]

    def test_taken_local_id_is_rejected(self, service, repo):
        repo.local_id_exists.return_value = True

        with pytest.raises(ValidationError) as exc_info:
            service.create_order(CreateOrderDTO(client_id=uuid4(), local_order_id="FCD5"))

        assert exc_info.value.missing_fields == ("local_order_id",)
        repo.create.assert_not_called()

    def test_next_local_id_skips_foreign_suffixes(self, service, repo):
        repo.local_ids_with_prefix.return_value = ["FCD1001", "FCD1007", "FCD1007-S", "FCDX"]
        assert service.next_local_order_id() == "FCD1008"

    def test_next_local_id_has_a_floor(self, service, repo):
        repo.local_ids_with_prefix.return_value = ["FCD3"]
        assert service.next_local_order_id() == "FCD1001"


class TestAdvance:
    def test_missing_order(self, service, repo):
        repo.get_by_id.return_value = None

        with pytest.raises(OrderNotFound):
            service.advance(uuid4(), {}, user="clerk")

    @pytest.mark.parametrize("status", [OrderStatus.COMPLETED, OrderStatus.CANCELLED])
    def test_terminal_orders_cannot_advance(self, service, repo, status):
        repo.get_by_id.return_value = stub_order(status=status)

        with pytest.raises(IllegalTransitionError):
            service.advance(uuid4(), {}, user="clerk")
        repo.apply_changes.assert_not_called()

    def test_batch_managed_order_is_refused(self, service, repo):
        repo.get_by_id.return_value = stub_order(
            status=OrderStatus.IN_TRANSIT, shipment_id="SHP-9"
        )

        with pytest.raises(IllegalTransitionError):
            service.advance(uuid4(), {"arrival_date_at_office": date(2026, 1, 1)}, user="clerk")

    def test_shipment_id_outside_batch_states_is_allowed(self, service, repo):
        repo.get_by_id.return_value = stub_order(status=OrderStatus.ORDERED, shipment_id="SHP-9")

        saved = service.advance(uuid4(), {"tracking_number": "TRK1"}, user="clerk")

        assert saved.status == OrderStatus.SHIPPED_FROM_STORE

    def test_missing_input_persists_nothing(self, service, repo, bus):
        repo.get_by_id.return_value = stub_order(status=OrderStatus.ORDERED)

        with pytest.raises(ValidationError):
            service.advance(uuid4(), {}, user="clerk")
        repo.apply_changes.assert_not_called()
        bus.publish.assert_not_called()

    def test_weighing_computes_shipping_cost(self, service, repo):
        order = stub_order(status=OrderStatus.ARRIVED_AT_OFFICE, shipping_type="fast")
        repo.get_by_id.return_value = order

        service.advance(
            order.id,
            ArrivedAtOfficeAdvancePayload(weight=Decimal("2.5"), storage_location="A-03"),
            user="clerk",
        )

        _, fields, activity = repo.apply_changes.call_args.args
        assert fields["shipping_cost"] == Decimal("1125")
        assert fields["status"] == OrderStatus.STORED
        assert fields["storage_date"] is not None
        assert activity.activity == "Stored at A-03"

    def test_typed_payload_for_other_status(self, service, repo):
        repo.get_by_id.return_value = stub_order(status=OrderStatus.NEW)

        with pytest.raises(IllegalTransitionError):
            service.advance(uuid4(), OrderedAdvancePayload(tracking_number="T"), user="clerk")

    def test_persistence_error_propagates_without_event(self, service, repo, bus):
        order = stub_order(status=OrderStatus.ORDERED)
        repo.get_by_id.return_value = order
        repo.apply_changes.side_effect = PersistenceError("disk full")

        with pytest.raises(PersistenceError):
            service.advance(order.id, {"tracking_number": "TRK1"}, user="clerk")

        assert order.status == OrderStatus.ORDERED
        assert order.tracking_number == ""
        bus.publish.assert_not_called()

    def test_publishes_advanced_event(self, service, repo, bus):
        order = stub_order(status=OrderStatus.ORDERED)
        repo.get_by_id.return_value = order

        service.advance(order.id, {"tracking_number": "TRK1"}, user="clerk")

        event = bus.publish.call_args.args[0]
        assert isinstance(event, OrderAdvanced)
        assert event.to_status == OrderStatus.SHIPPED_FROM_STORE
        assert event.actor == "clerk"


class TestRevert:
    def test_authentication_is_checked_first(self, service, repo, reauth):
        repo.get_by_id.return_value = stub_order(status=OrderStatus.NEW)
        reauth.reauthenticate.side_effect = AuthenticationError("bad proof")

        with pytest.raises(AuthenticationError):
            service.revert(uuid4(), "bad", user="clerk")
        repo.apply_changes.assert_not_called()

    def test_new_cannot_revert(self, service, repo):
        repo.get_by_id.return_value = stub_order(status=OrderStatus.NEW)

        with pytest.raises(IllegalTransitionError):
            service.revert(uuid4(), "proof", user="clerk")

    def test_cancelled_cannot_revert(self, service, repo):
        repo.get_by_id.return_value = stub_order(status=OrderStatus.CANCELLED)

        with pytest.raises(IllegalTransitionError):
            service.revert(uuid4(), "proof", user="clerk")

    def test_completed_goes_back_to_stored(self, service, repo, reauth):
        repo.get_by_id.return_value = stub_order(status=OrderStatus.COMPLETED)

        saved = service.revert(uuid4(), "proof", user="admin")

        reauth.reauthenticate.assert_called_once_with("admin", "proof")
        assert saved.status == OrderStatus.STORED


class TestCancel:
    def test_blank_reason(self, service, repo):
        repo.get_by_id.return_value = stub_order(status=OrderStatus.ORDERED)

        with pytest.raises(ValidationError) as exc_info:
            service.cancel(uuid4(), "  ", user="clerk")
        assert exc_info.value.missing_fields == ("reason",)

    def test_state_is_checked_before_reason(self, service, repo):
        repo.get_by_id.return_value = stub_order(status=OrderStatus.NEW)

        with pytest.raises(IllegalTransitionError):
            service.cancel(uuid4(), "", user="clerk")

    def test_reason_is_prefixed_to_notes(self, service, repo):
        repo.get_by_id.return_value = stub_order(status=OrderStatus.ORDERED, notes="fragile")

        saved = service.cancel(uuid4(), "out of stock", user="clerk")

        assert saved.status == OrderStatus.CANCELLED
        assert saved.notes == "[Cancel]: out of stock\nfragile"


class TestSplit:
    @pytest.mark.parametrize("quantity", [3, 4])
    def test_quantity_must_leave_items_behind(self, service, repo, quantity):
        repo.get_by_id.return_value = stub_order(quantity=3)

        with pytest.raises(ValidationError):
            service.split(uuid4(), SplitOrderDTO(quantity=quantity, tracking_number="T"))

    def test_single_item_order_cannot_split(self, service, repo):
        repo.get_by_id.return_value = stub_order(quantity=1)

        with pytest.raises(ValidationError):
            service.split(uuid4(), SplitOrderDTO(quantity=1, tracking_number="T"))

    def test_only_new_orders(self, service, repo):
        repo.get_by_id.return_value = stub_order(status=OrderStatus.ORDERED, quantity=3)

        with pytest.raises(IllegalTransitionError):
            service.split(uuid4(), SplitOrderDTO(quantity=1, tracking_number="T"))

    def test_suffix_increments_when_taken(self, service, repo):
        order = stub_order(quantity=3, price_in_mru=Decimal("300"), commission=Decimal("30"))
        repo.get_by_id.return_value = order
        repo.local_id_exists.side_effect = lambda local_id: local_id == "FCD1001-S"
        repo.split.return_value = (order, order)

        service.split(order.id, SplitOrderDTO(quantity=1, tracking_number="T"))

        new_order = repo.split.call_args.args[3]
        assert new_order["local_order_id"] == "FCD1001-S2"

    def test_price_adjustment_cannot_exceed_price(self, service, repo):
        repo.get_by_id.return_value = stub_order(quantity=3, price_in_mru=Decimal("300"))

        with pytest.raises(ValidationError) as exc_info:
            service.split(
                uuid4(),
                SplitOrderDTO(quantity=1, tracking_number="T", price_adjustment=Decimal("500")),
            )
        assert exc_info.value.missing_fields == ("price_adjustment",)
        repo.split.assert_not_called()


class TestUpdateDetails:
    def test_lifecycle_fields_are_refused(self, service, repo, bus):
        repo.get_by_id.return_value = stub_order(status=OrderStatus.ORDERED)

        with pytest.raises(ValidationError) as exc_info:
            service.update_details(uuid4(), {"status": "completed", "notes": "x"})

        assert exc_info.value.missing_fields == ("status",)
        repo.apply_changes.assert_not_called()
        bus.publish.assert_not_called()

    def test_unknown_fields_are_refused(self, service, repo):
        repo.get_by_id.return_value = stub_order()

        with pytest.raises(ValidationError) as exc_info:
            service.update_details(uuid4(), {"colour": "red"})
        assert exc_info.value.missing_fields == ("colour",)

    def test_empty_edit_is_refused(self, service, repo):
        repo.get_by_id.return_value = stub_order()

        with pytest.raises(ValidationError):
            service.update_details(uuid4(), {})
        repo.apply_changes.assert_not_called()

    def test_saves_without_history_entry(self, service, repo):
        repo.get_by_id.return_value = stub_order()

        saved = service.update_details(uuid4(), {"amount_paid": "400", "notes": "paid cash"})

        assert saved.amount_paid == Decimal("400")
        assert saved.notes == "paid cash"
        assert repo.apply_changes.call_args.args[2] is None

    def test_percentage_commission_follows_rate(self, service, repo):
        repo.get_by_id.return_value = stub_order()

        saved = service.update_details(uuid4(), {"commission_rate": "15"})

        assert saved.commission == Decimal("150")

    def test_fixed_commission_is_kept_as_sent(self, service, repo):
        repo.get_by_id.return_value = stub_order()

        saved = service.update_details(
            uuid4(), {"commission_type": "fixed", "commission": "70"}
        )

        assert saved.commission == Decimal("70")

    def test_weighed_order_is_repriced_on_shipping_change(self, service, repo):
        repo.get_by_id.return_value = stub_order(
            status=OrderStatus.STORED, weight=Decimal("2"), shipping_cost=Decimal("560")
        )

        saved = service.update_details(uuid4(), {"shipping_type": "fast"})

        assert saved.shipping_cost == Decimal("900")

    def test_publishes_updated_event(self, service, repo, bus):
        order = stub_order()
        repo.get_by_id.return_value = order

        service.update_details(order.id, {"store": "Amazon"}, user="clerk")

        event = bus.publish.call_args.args[0]
        assert isinstance(event, OrderUpdated)
        assert event.actor == "clerk"
        assert event.changes == {"store": "Amazon"}
        assert event.activity == "Updated order: FCD1001"


@pytest.mark.parametrize(
    "from_status, changes, expected",
    [
        (OrderStatus.STORED, {"storage_location": "A-01"}, ("Delivered to client", "Deliver Order")),
        (OrderStatus.ARRIVED_AT_OFFICE, {"storage_location": "A-01"}, ("Stored at A-01", "Store Order")),
        (OrderStatus.ORDERED, {"tracking_number": "T1"}, ("Added Tracking: T1", "Add Tracking")),
        (OrderStatus.NEW, {"global_order_id": "G1"}, ("Added Global ID: G1", "Add Global ID")),
        (OrderStatus.ARRIVED_AT_HUB, {}, ("Updated Details", "Update Details")),
    ],
)
def test_describe_advance(from_status, changes, expected):
    assert describe_advance(from_status, changes) == expected
