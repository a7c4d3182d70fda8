"""Unit tests for the pure order reducer.

Covers:
- Forward transitions apply changes and append exactly one history entry.
- Attachments are appended to existing image lists, never replaced.
- Revert, cancel and split only touch the fields they own.
- Detail edits change fields without a history entry and never the status.
- Events built for another status are rejected.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.dtos import ActivityEntryDTO, OrderSnapshot
from modules.orders.events import (
    OrderAdvanced,
    OrderCancelled,
    OrderCreated,
    OrderReverted,
    OrderSplit,
    OrderUpdated,
)
from modules.orders.exceptions import IllegalTransitionError
from modules.orders.reducer import apply_event, history_entry
from shared.domain.events import DomainEvent

pytestmark = pytest.mark.unit


def _snapshot(**overrides) -> OrderSnapshot:
    data = {
        "id": uuid4(),
        "local_order_id": "FCD1001",
        "client_id": uuid4(),
        "status": OrderStatus.NEW,
        "quantity": 3,
        "price_in_mru": Decimal("300"),
        "commission": Decimal("30"),
        "history": (
            ActivityEntryDTO(
                timestamp=datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc),
                activity="Order Created",
                user="clerk",
            ),
        ),
    }
    data.update(overrides)
    return OrderSnapshot(**data)


class TestAdvance:
    def test_applies_changes_and_moves_forward(self):
        before = _snapshot(status=OrderStatus.ORDERED)
        event = OrderAdvanced(
            aggregate_id=before.id,
            actor="clerk",
            from_status=OrderStatus.ORDERED,
            to_status=OrderStatus.SHIPPED_FROM_STORE,
            changes={"tracking_number": "TRK123"},
            activity="Added Tracking: TRK123",
        )

        after = apply_event(before, event)

        assert after.status == OrderStatus.SHIPPED_FROM_STORE
        assert after.tracking_number == "TRK123"
        assert len(after.history) == len(before.history) + 1
        assert after.history[-1].activity == "Added Tracking: TRK123"
        assert after.history[-1].user == "clerk"

    def test_does_not_mutate_input(self):
        before = _snapshot(status=OrderStatus.ORDERED)
        event = OrderAdvanced(
            aggregate_id=before.id,
            from_status=OrderStatus.ORDERED,
            to_status=OrderStatus.SHIPPED_FROM_STORE,
            changes={"tracking_number": "TRK123"},
        )

        apply_event(before, event)

        assert before.status == OrderStatus.ORDERED
        assert before.tracking_number == ""
        assert len(before.history) == 1

    def test_attachments_are_appended(self):
        before = _snapshot(
            status=OrderStatus.ARRIVED_AT_OFFICE,
            weighing_images=("https://img/1.jpg",),
        )
        event = OrderAdvanced(
            aggregate_id=before.id,
            from_status=OrderStatus.ARRIVED_AT_OFFICE,
            to_status=OrderStatus.STORED,
            changes={"weight": Decimal("2.5"), "storage_location": "A-03"},
            attachments={"weighing_images": ("https://img/2.jpg",)},
        )

        after = apply_event(before, event)

        assert after.weighing_images == ("https://img/1.jpg", "https://img/2.jpg")
        assert after.storage_location == "A-03"

    def test_wrong_origin_status_is_rejected(self):
        before = _snapshot(status=OrderStatus.NEW)
        event = OrderAdvanced(
            aggregate_id=before.id,
            from_status=OrderStatus.ORDERED,
            to_status=OrderStatus.SHIPPED_FROM_STORE,
        )

        with pytest.raises(IllegalTransitionError):
            apply_event(before, event)


class TestRevert:
    def test_steps_back_and_records_both_states(self):
        before = _snapshot(status=OrderStatus.STORED, storage_location="A-03")
        event = OrderReverted(
            aggregate_id=before.id,
            actor="admin",
            from_status=OrderStatus.STORED,
            to_status=OrderStatus.ARRIVED_AT_OFFICE,
        )

        after = apply_event(before, event)

        assert after.status == OrderStatus.ARRIVED_AT_OFFICE
        assert after.storage_location == "A-03"
        assert after.history[-1].activity == "Reverted from stored to arrived_at_office"


class TestCancel:
    def test_cancel_sets_status_and_notes(self):
        before = _snapshot(status=OrderStatus.ORDERED)
        event = OrderCancelled(
            aggregate_id=before.id,
            reason="client changed mind",
            notes="[Cancel]: client changed mind",
        )

        after = apply_event(before, event)

        assert after.status == OrderStatus.CANCELLED
        assert after.notes == "[Cancel]: client changed mind"
        assert after.history[-1].activity == "Order Cancelled. Reason: client changed mind"

    def test_cancel_outside_ordered_is_rejected(self):
        before = _snapshot(status=OrderStatus.NEW)
        event = OrderCancelled(aggregate_id=before.id, reason="x", notes="x")

        with pytest.raises(IllegalTransitionError):
            apply_event(before, event)


class TestSplit:
    def test_split_updates_kept_portion(self):
        before = _snapshot()
        event = OrderSplit(
            aggregate_id=before.id,
            new_local_order_id="FCD1001-S",
            moved_quantity=1,
            changes={
                "quantity": 2,
                "price_in_mru": Decimal("200"),
                "commission": Decimal("20"),
            },
        )

        after = apply_event(before, event)

        assert after.status == OrderStatus.NEW
        assert after.quantity == 2
        assert after.price_in_mru == Decimal("200")
        assert after.history[-1].activity == "Split Order. Moved 1 items to FCD1001-S."


class TestCreated:
    def test_created_on_empty_history(self):
        before = _snapshot(history=())
        event = OrderCreated(aggregate_id=before.id, local_order_id="FCD1001")

        after = apply_event(before, event)

        assert [entry.activity for entry in after.history] == ["Order Created"]

    def test_created_twice_is_rejected(self):
        before = _snapshot()
        event = OrderCreated(aggregate_id=before.id, local_order_id="FCD1001")

        with pytest.raises(IllegalTransitionError):
            apply_event(before, event)


class TestUpdated:
    def test_edit_changes_fields_without_history(self):
        before = _snapshot(status=OrderStatus.ORDERED)
        event = OrderUpdated(
            aggregate_id=before.id,
            actor="clerk",
            local_order_id="FCD1001",
            changes={"amount_paid": Decimal("120"), "notes": "paid at desk"},
        )

        after = apply_event(before, event)

        assert after.amount_paid == Decimal("120")
        assert after.notes == "paid at desk"
        assert after.status == OrderStatus.ORDERED
        assert after.history == before.history

    def test_status_edit_is_rejected(self):
        before = _snapshot()
        event = OrderUpdated(
            aggregate_id=before.id,
            local_order_id="FCD1001",
            changes={"status": OrderStatus.COMPLETED},
        )

        with pytest.raises(IllegalTransitionError):
            apply_event(before, event)


def test_foreign_event_raises_type_error():
    before = _snapshot()

    with pytest.raises(TypeError):
        apply_event(before, DomainEvent(aggregate_id=before.id))


def test_history_entry_uses_event_time_and_actor():
    occurred = datetime(2026, 3, 1, 12, 30, tzinfo=timezone.utc)
    event = OrderCreated(
        aggregate_id=uuid4(), actor="clerk", occurred_on=occurred, local_order_id="FCD1001"
    )

    entry = history_entry(event)

    assert entry.timestamp == occurred
    assert entry.user == "clerk"
    assert entry.activity == "Order Created"
