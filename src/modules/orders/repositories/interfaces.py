"""Order repository interface.

Extends ``IRepository[Order]`` with the writes the status engine needs.
Every write persists the changed fields together with the history entry
it produces, so an order is never stored without its matching history.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.dtos import ActivityEntryDTO
    from modules.orders.models import Order


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The aggregate includes its ``OrderActivity`` history.  Write methods
    raise ``PersistenceError`` when the store rejects the write and
    ``OrderNotFound`` when the target order is gone.
    """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with its client and history eager-loaded."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List orders with optional filters."""

    @abstractmethod
    def create(self, data: Dict[str, Any], activity: ActivityEntryDTO) -> Order:
        """Insert an order whose first history entry is *activity*."""

    @abstractmethod
    def apply_changes(
        self,
        order_id: UUID,
        fields: Dict[str, Any],
        activity: Optional[ActivityEntryDTO],
    ) -> Order:
        """Update *fields* and append *activity*, when given, in a single write."""

    @abstractmethod
    def split(
        self,
        order_id: UUID,
        fields: Dict[str, Any],
        activity: ActivityEntryDTO,
        new_order: Dict[str, Any],
        new_activity: ActivityEntryDTO,
    ) -> Tuple[Order, Order]:
        """Update the original order and insert the split-off one."""

    @abstractmethod
    def local_id_exists(self, local_order_id: str) -> bool:
        """Return ``True`` if an order already uses *local_order_id*."""

    @abstractmethod
    def local_ids_with_prefix(self, prefix: str) -> List[str]:
        """All local order ids starting with *prefix*."""
