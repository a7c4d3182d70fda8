"""Domain events for the Orders bounded context.

Every state-changing operation on an order is expressed as one of these
events.  ``activity`` is the history line the event appends and
``action`` the short label written to the global activity log.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Tuple

from shared.domain.events import DomainEvent


@dataclass(frozen=True, kw_only=True)
class OrderCreated(DomainEvent):
    """Raised when an order is created (directly or by a split)."""

    local_order_id: str
    split_from: str = ""
    activity: str = "Order Created"
    action: str = "Create Order"


@dataclass(frozen=True, kw_only=True)
class OrderAdvanced(DomainEvent):
    """Raised when an order moves one step forward."""

    from_status: str
    to_status: str
    changes: Mapping[str, Any] = field(default_factory=dict)
    attachments: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    activity: str = "Updated Details"
    action: str = "Update Details"


@dataclass(frozen=True, kw_only=True)
class OrderReverted(DomainEvent):
    """Raised when an order moves one step back."""

    from_status: str
    to_status: str
    action: str = "Revert Status"

    @property
    def activity(self) -> str:
        return f"Reverted from {self.from_status} to {self.to_status}"


@dataclass(frozen=True, kw_only=True)
class OrderCancelled(DomainEvent):
    """Raised when an ORDERED order is cancelled."""

    reason: str
    notes: str
    action: str = "Cancel Order"

    @property
    def activity(self) -> str:
        return f"Order Cancelled. Reason: {self.reason}"


@dataclass(frozen=True, kw_only=True)
class OrderSplit(DomainEvent):
    """Raised on the original order when part of it is split off."""

    new_local_order_id: str
    moved_quantity: int
    changes: Mapping[str, Any] = field(default_factory=dict)
    action: str = "Split Order"

    @property
    def activity(self) -> str:
        return (
            f"Split Order. Moved {self.moved_quantity} items "
            f"to {self.new_local_order_id}."
        )


@dataclass(frozen=True, kw_only=True)
class OrderUpdated(DomainEvent):
    """Raised when order details are edited directly.

    Detail edits leave status and history alone; only the activity log
    records them.
    """

    local_order_id: str
    changes: Mapping[str, Any] = field(default_factory=dict)
    action: str = "Update Order"

    @property
    def activity(self) -> str:
        return f"Updated order: {self.local_order_id}"
