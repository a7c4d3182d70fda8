"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.  None of them leaves partial state behind.
"""

from __future__ import annotations

from typing import Iterable

from modules.core.authentication import AuthenticationError

__all__ = [
    "AuthenticationError",
    "IllegalTransitionError",
    "OrderNotFound",
    "PersistenceError",
    "ValidationError",
]


class OrderNotFound(Exception):
    """The requested order does not exist."""


class ValidationError(Exception):
    """Input required by the current status is missing or invalid."""

    def __init__(self, message: str, missing_fields: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.missing_fields: tuple[str, ...] = tuple(missing_fields)

    @classmethod
    def for_fields(cls, fields: Iterable[str]) -> ValidationError:
        fields = tuple(fields)
        return cls(f"Missing required fields: {', '.join(fields)}.", fields)


class IllegalTransitionError(Exception):
    """The transition is not allowed from the order's current state."""


class PersistenceError(Exception):
    """The order store rejected a write; the order was left unchanged."""
