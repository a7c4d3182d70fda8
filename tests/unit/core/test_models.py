"""Unit tests for BaseModel, exercised through concrete domain models.

Covers:
- UUIDv7 primary keys, unique and time ordered.
- ``updated_at`` refreshed even when ``update_fields`` is given.
- Drawer capacity defaulting and name validation.
"""

from __future__ import annotations

import uuid

import pytest
from django.core.exceptions import ValidationError

from modules.storage.models import StorageDrawer

pytestmark = pytest.mark.unit


class TestBaseModel:
    def test_id_is_uuid_version_7(self):
        drawer = StorageDrawer.objects.create(name="A", capacity=4)
        assert isinstance(drawer.id, uuid.UUID)
        assert drawer.id.version == 7

    def test_ids_are_time_ordered(self):
        first = StorageDrawer.objects.create(name="A", capacity=4)
        second = StorageDrawer.objects.create(name="B", capacity=4)
        assert first.id != second.id
        assert str(first.id) < str(second.id)

    def test_created_at_does_not_change_on_save(self):
        drawer = StorageDrawer.objects.create(name="A", capacity=4)
        created = drawer.created_at
        drawer.position = 3
        drawer.save()
        drawer.refresh_from_db()
        assert drawer.created_at == created

    def test_save_with_update_fields_includes_updated_at(self):
        drawer = StorageDrawer.objects.create(name="A", capacity=4)
        original_updated = drawer.updated_at
        drawer.position = 2
        drawer.save(update_fields=["position"])
        drawer.refresh_from_db()
        assert drawer.updated_at > original_updated

    def test_id_is_not_editable(self):
        assert StorageDrawer._meta.get_field("id").editable is False


class TestStorageDrawer:
    def test_capacity_defaults_to_grid(self):
        drawer = StorageDrawer.objects.create(name="C", rows=3, columns=4, capacity=0)
        assert drawer.capacity == 12

    def test_explicit_capacity_is_kept(self):
        drawer = StorageDrawer.objects.create(name="C", rows=3, columns=4, capacity=10)
        assert drawer.capacity == 10

    def test_name_with_dash_is_invalid(self):
        drawer = StorageDrawer(name="A-1", capacity=4)
        with pytest.raises(ValidationError):
            drawer.full_clean()

    def test_configuration_order(self):
        StorageDrawer.objects.create(name="B", capacity=4, position=1)
        StorageDrawer.objects.create(name="A", capacity=4, position=2)
        StorageDrawer.objects.create(name="C", capacity=4, position=0)
        assert list(StorageDrawer.objects.values_list("name", flat=True)) == ["C", "B", "A"]
