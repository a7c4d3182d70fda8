"""Storage service layer (Use Cases).

Wires the pure recommender in ``recommender.py`` to the order and drawer
repositories, and manages drawer configuration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

import structlog

from modules.orders.constants import OrderStatus
from modules.orders.exceptions import IllegalTransitionError, OrderNotFound
from modules.storage import recommender
from modules.storage.exceptions import DrawerAlreadyExists, DrawerNotEmpty, DrawerNotFound
from modules.storage.models import StorageDrawer

if TYPE_CHECKING:
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.storage.dtos import CreateDrawerDTO
    from modules.storage.repositories.interfaces import IDrawerRepository

logger = structlog.get_logger(__name__)


class StorageService:
    """Application service for storage use-cases."""

    def __init__(
        self,
        order_repository: IOrderRepository,
        drawer_repository: IDrawerRepository,
    ) -> None:
        self._order_repo = order_repository
        self._drawer_repo = drawer_repository

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def suggest_for_order(self, order_id: str) -> recommender.Suggestion:
        """Suggest a slot for an order waiting to be stored.

        Raises:
            OrderNotFound: order does not exist.
            IllegalTransitionError: order is not ARRIVED_AT_OFFICE.
        """
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        if order.status != OrderStatus.ARRIVED_AT_OFFICE:
            raise IllegalTransitionError(
                f"Storage suggestions are only available for orders arrived at the "
                f"office; {order.local_order_id} is {order.status}."
            )

        suggestion = recommender.suggest(
            order,
            self._stored_orders(),
            self._drawer_repo.list(),
        )
        logger.info(
            "storage.suggestion_computed",
            order_id=str(order.id),
            location=suggestion.location,
            score=suggestion.score,
        )
        return suggestion

    def drawer_overview(self) -> List[recommender.DrawerOccupancy]:
        return recommender.drawer_occupancy(self._drawer_repo.list(), self._stored_orders())

    def is_slot_free(self, location: str) -> bool:
        return location not in recommender.occupied_slots(self._stored_orders())

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_drawer(self, dto: CreateDrawerDTO) -> StorageDrawer:
        """Raises ``DrawerAlreadyExists`` if the name is taken."""
        if self._drawer_repo.get_by_name(dto.name):
            logger.warning("drawer.duplicate_name", drawer=dto.name)
            raise DrawerAlreadyExists(f"Drawer {dto.name} already exists.")

        drawer = StorageDrawer(
            name=dto.name,
            rows=dto.rows,
            columns=dto.columns,
            capacity=dto.effective_capacity,
            position=dto.position,
        )
        drawer = self._drawer_repo.save(drawer)
        logger.info("drawer.created", drawer=drawer.name, capacity=drawer.capacity)
        return drawer

    def delete_drawer(self, id: str) -> None:
        """Raises ``DrawerNotFound`` or ``DrawerNotEmpty``."""
        drawer = self._drawer_repo.get_by_id(id)
        if not drawer:
            raise DrawerNotFound(f"Drawer {id} not found.")
        if recommender.orders_in_drawer(drawer, self._stored_orders()):
            raise DrawerNotEmpty(f"Drawer {drawer.name} still holds stored orders.")
        self._drawer_repo.delete(id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _stored_orders(self):
        return self._order_repo.list({"status": OrderStatus.STORED})
