"""Storage DTOs for the Service Layer."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CreateDrawerDTO(BaseModel):
    """Immutable DTO for drawer creation.

    ``capacity`` defaults to ``rows × columns`` when omitted.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    rows: int = Field(default=1, ge=1)
    columns: int = Field(default=1, ge=1)
    capacity: Optional[int] = Field(default=None, ge=1)
    position: int = Field(default=0, ge=0)

    @field_validator("name")
    @classmethod
    def name_is_slot_prefix(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("Name is required.")
        if "-" in v:
            raise ValueError("Drawer names cannot contain '-'.")
        return v

    @property
    def effective_capacity(self) -> int:
        return self.capacity or self.rows * self.columns
