"""Activity log sinks.

``DjangoActivityLogSink`` writes synchronously and is what the Celery task
uses.  ``CeleryActivityLogSink`` only enqueues; a broker outage is logged
and the entry is dropped, the operation that produced it is not affected.
"""

from __future__ import annotations

import structlog
from kombu.exceptions import OperationalError

from modules.audit.dtos import ActivityLogEntryDTO
from modules.audit.models import ActivityLogEntry
from modules.audit.repositories.interfaces import IActivityLogSink

logger = structlog.get_logger(__name__)


class DjangoActivityLogSink(IActivityLogSink):
    """Writes entries straight to the ``activity_log`` table."""

    def append(self, entry: ActivityLogEntryDTO) -> None:
        record = ActivityLogEntry.objects.create(**entry.model_dump())
        logger.info(
            "audit.appended",
            entry_id=str(record.id),
            action=entry.action,
            entity_id=entry.entity_id,
        )


class CeleryActivityLogSink(IActivityLogSink):
    """Fire-and-forget: enqueues ``audit.append_activity``."""

    def append(self, entry: ActivityLogEntryDTO) -> None:
        from modules.audit.tasks import append_activity

        try:
            append_activity.delay(entry.model_dump(mode="json"))
        except (OperationalError, ConnectionError) as exc:
            logger.warning(
                "audit.enqueue_failed",
                action=entry.action,
                entity_id=entry.entity_id,
                error=str(exc),
            )
