"""Storage domain exceptions."""

from __future__ import annotations


class DrawerAlreadyExists(Exception):
    """A drawer with the same name already exists."""


class DrawerNotFound(Exception):
    """The requested drawer does not exist."""


class DrawerNotEmpty(Exception):
    """The drawer still holds stored orders."""
