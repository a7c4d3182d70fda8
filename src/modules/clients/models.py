"""Client model.

A client places orders and later picks up their stored packages.  Clients
are referenced by orders (``PROTECT``) so that financial and storage
history is never orphaned.
"""

from __future__ import annotations

from django.db import models

from modules.core.models import BaseModel


class Gender(models.TextChoices):
    MALE = "male", "Male"
    FEMALE = "female", "Female"


class Client(BaseModel):
    """Client aggregate root.

    ``phone`` is unique: it is the identifier staff use at the counter.
    """

    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=32, unique=True)
    whatsapp_number = models.CharField(max_length=32, blank=True, default="")
    address = models.TextField(blank=True, default="")
    gender = models.CharField(
        max_length=8, choices=Gender.choices, blank=True, default=""
    )

    class Meta:
        db_table = "clients"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="clients_created_idx"),
            models.Index(fields=["name"], name="clients_name_idx"),
        ]

    @property
    def contact_number(self) -> str:
        """Number used for WhatsApp notifications (falls back to ``phone``)."""
        return self.whatsapp_number or self.phone

    def __str__(self) -> str:
        return f"{self.name} ({self.phone})"
