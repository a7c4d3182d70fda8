"""Audit DTOs."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ActivityLogEntryDTO(BaseModel):
    """Immutable audit record handed to an ``IActivityLogSink``."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    user: str
    action: str
    entity_type: str = "order"
    entity_id: str = ""
    details: str = ""
