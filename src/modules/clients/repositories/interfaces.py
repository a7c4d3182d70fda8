"""Client repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.clients.models import Client


class IClientRepository(IRepository["Client"]):
    """Repository contract for the Client aggregate."""

    @abstractmethod
    def get_by_phone(self, phone: str) -> Optional[Client]:
        """Retrieve a client by phone number."""

    @abstractmethod
    def has_orders(self, id: str) -> bool:
        """Return ``True`` if any order references the client."""
