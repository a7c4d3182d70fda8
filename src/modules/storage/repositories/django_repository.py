"""Django ORM implementation of the Drawer repository."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.storage.models import StorageDrawer
from modules.storage.repositories.interfaces import IDrawerRepository

logger = structlog.get_logger(__name__)


class DrawerDjangoRepository(IDrawerRepository):
    """Concrete Drawer repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[StorageDrawer]:
        try:
            return StorageDrawer.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_name(self, name: str) -> Optional[StorageDrawer]:
        return StorageDrawer.objects.filter(name=name).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[StorageDrawer]:
        queryset = StorageDrawer.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: StorageDrawer) -> StorageDrawer:
        is_new = entity._state.adding
        entity.save()
        logger.info("drawer.saved", drawer=entity.name, is_new=is_new)
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        drawer = self.get_by_id(id)
        if not drawer:
            return False
        drawer.delete()
        logger.info("drawer.deleted", drawer=drawer.name)
        return True
