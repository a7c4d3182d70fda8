"""Client DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
DTOs are immutable (``frozen=True``).
"""

from __future__ import annotations

import re
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator

GenderLiteral = Literal["male", "female", ""]


def _normalize_phone(value: str) -> str:
    """Keep a leading ``+`` and digits only."""
    value = value.strip()
    prefix = "+" if value.startswith("+") else ""
    return prefix + re.sub(r"\D", "", value)


class CreateClientDTO(BaseModel):
    """Immutable DTO for client creation requests."""

    model_config = ConfigDict(frozen=True)

    name: str
    phone: str
    whatsapp_number: str = ""
    address: str = ""
    gender: GenderLiteral = ""

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name is required.")
        return v.strip()

    @field_validator("phone")
    @classmethod
    def phone_must_have_digits(cls, v: str) -> str:
        normalized = _normalize_phone(v)
        if len(normalized.lstrip("+")) < 6:
            raise ValueError("Phone number is too short.")
        return normalized

    @field_validator("whatsapp_number")
    @classmethod
    def normalize_whatsapp(cls, v: str) -> str:
        return _normalize_phone(v) if v else ""


class UpdateClientDTO(BaseModel):
    """Partial update: ``None`` means "leave unchanged"."""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    phone: Optional[str] = None
    whatsapp_number: Optional[str] = None
    address: Optional[str] = None
    gender: Optional[GenderLiteral] = None

    @field_validator("phone")
    @classmethod
    def normalize_phone(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_phone(v) if v else v
