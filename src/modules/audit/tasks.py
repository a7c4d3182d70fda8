"""Asynchronous tasks of the audit module."""

from __future__ import annotations

from typing import Any, Dict

import structlog
from celery import shared_task

from modules.audit.dtos import ActivityLogEntryDTO
from modules.audit.repositories.sinks import DjangoActivityLogSink

logger = structlog.get_logger(__name__)


@shared_task(name="audit.append_activity", ignore_result=True)
def append_activity(entry: Dict[str, Any]) -> None:
    """Persist one audit entry.  Not retried: a lost entry is tolerated."""
    DjangoActivityLogSink().append(ActivityLogEntryDTO.model_validate(entry))
