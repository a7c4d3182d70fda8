"""Client domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.
"""

from __future__ import annotations


class ClientAlreadyExists(Exception):
    """A client with the same phone number already exists."""


class ClientNotFound(Exception):
    """The requested client does not exist."""


class ClientHasOrders(Exception):
    """The client still owns orders and cannot be removed."""
