"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
All write operations run inside ``transaction.atomic()`` so the order row
and its history entry are stored together or not at all.

Concurrency control on updates uses ``select_for_update()``; concurrent
writers are serialized and the last write wins.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from modules.orders.dtos import ActivityEntryDTO
from modules.orders.exceptions import OrderNotFound, PersistenceError
from modules.orders.models import Order, OrderActivity
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with eager-loaded relations.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return (
                Order.objects.select_related("client")
                .prefetch_related("history")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List orders with optional ORM filters (``status``, ``client_id``, ...)."""
        queryset = Order.objects.select_related("client").prefetch_related("history")
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def local_id_exists(self, local_order_id: str) -> bool:
        return Order.objects.filter(local_order_id=local_order_id).exists()

    def local_ids_with_prefix(self, prefix: str) -> List[str]:
        return list(
            Order.objects.filter(local_order_id__startswith=prefix).values_list(
                "local_order_id", flat=True
            )
        )

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def create(self, data: Dict[str, Any], activity: ActivityEntryDTO) -> Order:
        try:
            with transaction.atomic():
                order = self._insert(data, activity)
        except DatabaseError as exc:
            raise self._persistence_error("create", data.get("local_order_id"), exc)

        logger.info(
            "order.created",
            order_id=str(order.id),
            local_order_id=order.local_order_id,
        )
        return self.get_by_id(order.id)

    def apply_changes(
        self,
        order_id: UUID,
        fields: Dict[str, Any],
        activity: Optional[ActivityEntryDTO],
    ) -> Order:
        try:
            with transaction.atomic():
                self._update(order_id, fields, activity)
        except DatabaseError as exc:
            raise self._persistence_error("update", order_id, exc)

        logger.info("order.updated", order_id=str(order_id), fields=sorted(fields))
        return self.get_by_id(order_id)

    def split(
        self,
        order_id: UUID,
        fields: Dict[str, Any],
        activity: ActivityEntryDTO,
        new_order: Dict[str, Any],
        new_activity: ActivityEntryDTO,
    ) -> Tuple[Order, Order]:
        try:
            with transaction.atomic():
                self._update(order_id, fields, activity)
                created = self._insert(new_order, new_activity)
        except DatabaseError as exc:
            raise self._persistence_error("split", order_id, exc)

        logger.info(
            "order.split_persisted",
            order_id=str(order_id),
            new_order_id=str(created.id),
        )
        return self.get_by_id(order_id), self.get_by_id(created.id)

    # ------------------------------------------------------------------
    # Save / Delete (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist (create or update) an order without touching its history."""
        entity.save()
        logger.info("order.saved", order_id=str(entity.id))
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        order = self.get_by_id(id)
        if not order:
            return False
        order.delete()
        logger.info("order.deleted", order_id=str(id))
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _insert(self, data: Dict[str, Any], activity: ActivityEntryDTO) -> Order:
        order = Order(**data)
        order.save()
        self._append_activity(order.id, activity)
        return order

    def _update(
        self,
        order_id: UUID,
        fields: Dict[str, Any],
        activity: Optional[ActivityEntryDTO],
    ) -> Order:
        order = Order.objects.select_for_update().filter(id=order_id).first()
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.")
        for field, value in fields.items():
            setattr(order, field, value)
        order.save(update_fields=list(fields))
        if activity is not None:
            self._append_activity(order.id, activity)
        return order

    @staticmethod
    def _append_activity(order_id: UUID, activity: ActivityEntryDTO) -> OrderActivity:
        return OrderActivity.objects.create(
            order_id=order_id,
            timestamp=activity.timestamp,
            activity=activity.activity,
            user=activity.user,
        )

    @staticmethod
    def _persistence_error(operation: str, order_id: Any, exc: Exception) -> PersistenceError:
        logger.error(
            "order.persist_failed",
            operation=operation,
            order_id=str(order_id),
            error=str(exc),
        )
        return PersistenceError(f"Could not {operation} order: {exc}")
