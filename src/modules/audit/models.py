"""Global activity log.

One row per user-visible operation across the system.  Rows are written
best-effort after the operation itself committed, so the log may miss an
entry but never records an operation that did not happen.
"""

from __future__ import annotations

from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel


class EntityType(models.TextChoices):
    ORDER = "order", "Order"
    CLIENT = "client", "Client"
    DRAWER = "drawer", "Drawer"
    SYSTEM = "system", "System"


class ActivityLogEntry(BaseModel):
    """Append-only audit record; never updated after insert."""

    timestamp = models.DateTimeField(default=timezone.now)
    user = models.CharField(max_length=150, default="System")
    action = models.CharField(max_length=80)
    entity_type = models.CharField(
        max_length=16, choices=EntityType.choices, default=EntityType.ORDER
    )
    entity_id = models.CharField(max_length=64, blank=True, default="")
    details = models.TextField(blank=True, default="")

    class Meta:
        db_table = "activity_log"
        ordering = ["-timestamp"]
        indexes = [
            models.Index(fields=["-timestamp"], name="activity_log_ts_idx"),
            models.Index(fields=["entity_type", "entity_id"], name="activity_log_entity_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.timestamp:%Y-%m-%d %H:%M} {self.user}: {self.action}"
