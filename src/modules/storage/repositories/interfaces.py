"""Drawer repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.storage.models import StorageDrawer


class IDrawerRepository(IRepository["StorageDrawer"]):
    """Repository contract for storage drawers.

    ``list`` returns drawers in configuration order.
    """

    @abstractmethod
    def get_by_name(self, name: str) -> Optional[StorageDrawer]:
        """Retrieve a drawer by its name."""
