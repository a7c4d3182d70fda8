"""StorageDrawer model.

A drawer is a physical unit of numbered slots.  Slots are not stored:
a slot address is ``<drawer>-<NN>`` and a slot is occupied while a STORED
order holds that address in ``storage_location``.
"""

from __future__ import annotations

from typing import Any

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel


class StorageDrawer(BaseModel):
    """Physical drawer; ``capacity`` defaults to ``rows × columns``."""

    name = models.CharField(max_length=16, unique=True)
    capacity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    rows = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    columns = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    position = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "storage_drawers"
        # Configuration order; the recommender's fallback drawer is the first one.
        ordering = ["position", "created_at"]
        constraints = [
            models.CheckConstraint(
                check=models.Q(capacity__gte=1),
                name="storage_drawers_capacity_positive",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if "-" in (self.name or ""):
            raise ValidationError({"name": "Drawer names cannot contain '-'."})

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.capacity:
            self.capacity = self.rows * self.columns
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.name} ({self.capacity} slots)"
