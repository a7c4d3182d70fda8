"""Django ORM implementation of the Client repository.

Error handling follows the Null Object pattern: methods return ``None``
instead of raising HTTP-level exceptions: the Service Layer decides
how to translate a missing entity into an API response.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.clients.models import Client
from modules.clients.repositories.interfaces import IClientRepository

logger = structlog.get_logger(__name__)


class ClientDjangoRepository(IClientRepository):
    """Concrete Client repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Client]:
        """Returns ``None`` for non-existent or invalid IDs (e.g. malformed UUID)."""
        try:
            return Client.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Client]:
        queryset = Client.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Client) -> Client:
        is_new = entity._state.adding
        entity.save()
        logger.info("client.saved", client_id=str(entity.id), is_new=is_new)
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        client = self.get_by_id(id)
        if not client:
            return False
        client.delete()
        logger.info("client.deleted", client_id=str(id))
        return True

    def get_by_phone(self, phone: str) -> Optional[Client]:
        return Client.objects.filter(phone=phone).first()

    def has_orders(self, id: str) -> bool:
        from modules.orders.models import Order

        return Order.objects.filter(client_id=id).exists()
