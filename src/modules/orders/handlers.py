"""Event handlers for Orders domain events.

Each order event becomes one entry in the global activity log.  The append
is best-effort: the order change is already committed when handlers run.
"""

from __future__ import annotations

from typing import Optional

import structlog

from modules.audit.dtos import ActivityLogEntryDTO
from modules.audit.repositories.interfaces import IActivityLogSink
from modules.orders.events import (
    OrderAdvanced,
    OrderCancelled,
    OrderCreated,
    OrderReverted,
    OrderSplit,
    OrderUpdated,
)
from shared.domain.bus import IEventHandler
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


class OrderActivityAuditHandler(IEventHandler[DomainEvent]):
    """Writes order events to an ``IActivityLogSink``."""

    def __init__(self, sink: Optional[IActivityLogSink] = None) -> None:
        self._sink = sink

    @property
    def sink(self) -> IActivityLogSink:
        if self._sink is None:
            from modules.audit.repositories.sinks import CeleryActivityLogSink

            self._sink = CeleryActivityLogSink()
        return self._sink

    def handle(self, event: DomainEvent) -> None:
        details = event.activity  # type: ignore[attr-defined]
        to_status = getattr(event, "to_status", None)
        if to_status:
            details = f"{details} - New Status: {to_status}"

        self.sink.append(
            ActivityLogEntryDTO(
                timestamp=event.occurred_on,
                user=event.actor,
                action=event.action,  # type: ignore[attr-defined]
                entity_type="order",
                entity_id=str(event.aggregate_id),
                details=details,
            )
        )
        logger.debug(
            "order.audit_dispatched",
            event_name=event.event_name,
            order_id=str(event.aggregate_id),
        )


ORDER_EVENTS = (
    OrderCreated,
    OrderAdvanced,
    OrderReverted,
    OrderCancelled,
    OrderSplit,
    OrderUpdated,
)

order_activity_audit_handler = OrderActivityAuditHandler()
