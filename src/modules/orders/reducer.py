"""Pure reducer over order snapshots.

``apply_event`` folds one domain event into an ``OrderSnapshot`` and returns
a new snapshot.  It performs no I/O; the service persists whatever the
reducer produced.  History is only ever extended, never rewritten.
"""

from __future__ import annotations

from typing import Any, Dict

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
from shared.domain.events import DomainEvent


def history_entry(event: DomainEvent) -> ActivityEntryDTO:
    """The history line *event* appends."""
    return ActivityEntryDTO(
        timestamp=event.occurred_on,
        activity=event.activity,  # type: ignore[attr-defined]
        user=event.actor,
    )


def apply_event(snapshot: OrderSnapshot, event: DomainEvent) -> OrderSnapshot:
    """Return *snapshot* with *event* applied.

    Raises ``IllegalTransitionError`` when the event was built for a status
    other than the snapshot's current one, and ``TypeError`` for events that
    do not belong to the order aggregate.  ``OrderUpdated`` changes details
    only and appends no history entry.
    """
    update: Dict[str, Any] = {}

    if isinstance(event, OrderUpdated):
        if "status" in event.changes:
            raise IllegalTransitionError(
                f"Order {snapshot.local_order_id}: status cannot be edited directly."
            )
        return snapshot.model_copy(
            update={
                name: value
                for name, value in event.changes.items()
                if name in OrderSnapshot.model_fields
            }
        )

    if isinstance(event, OrderAdvanced):
        _expect_status(snapshot, event.from_status)
        update.update(event.changes)
        for name, images in event.attachments.items():
            update[name] = tuple(getattr(snapshot, name)) + tuple(images)
        update["status"] = event.to_status
    elif isinstance(event, OrderReverted):
        _expect_status(snapshot, event.from_status)
        update["status"] = event.to_status
    elif isinstance(event, OrderCancelled):
        _expect_status(snapshot, OrderStatus.ORDERED)
        update["status"] = OrderStatus.CANCELLED
        update["notes"] = event.notes
    elif isinstance(event, OrderSplit):
        _expect_status(snapshot, OrderStatus.NEW)
        update.update(event.changes)
    elif isinstance(event, OrderCreated):
        if snapshot.history:
            raise IllegalTransitionError(
                f"Order {snapshot.local_order_id} already has a creation entry."
            )
    else:
        raise TypeError(f"Unsupported order event: {event.event_name}")

    update["history"] = snapshot.history + (history_entry(event),)
    return snapshot.model_copy(update=update)


def _expect_status(snapshot: OrderSnapshot, status: str) -> None:
    if snapshot.status != status:
        raise IllegalTransitionError(
            f"Order {snapshot.local_order_id} is '{snapshot.status}', "
            f"expected '{status}'."
        )
