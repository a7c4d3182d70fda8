"""Activity log sink interface.

The sink is append-only: entries are never read back through it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modules.audit.dtos import ActivityLogEntryDTO


class IActivityLogSink(ABC):
    """Append-only destination for audit entries."""

    @abstractmethod
    def append(self, entry: ActivityLogEntryDTO) -> None:
        """Record *entry*."""
