"""Client service layer (Use Cases).

Orchestrates business logic for the Client aggregate, delegating
persistence to the injected ``IClientRepository``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import transaction

from modules.clients.exceptions import ClientAlreadyExists, ClientHasOrders, ClientNotFound
from modules.clients.models import Client

if TYPE_CHECKING:
    from modules.clients.dtos import CreateClientDTO, UpdateClientDTO
    from modules.clients.repositories.interfaces import IClientRepository

logger = structlog.get_logger(__name__)


class ClientService:
    """Application service for Client use-cases.

    Receives an ``IClientRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IClientRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_client(self, dto: CreateClientDTO) -> Client:
        """Create a new client.

        Raises:
            ClientAlreadyExists: if the phone number is already registered.
        """
        if self._repo.get_by_phone(dto.phone):
            logger.warning("client.duplicate_phone")
            raise ClientAlreadyExists("Phone number already registered.")

        client = Client(
            name=dto.name,
            phone=dto.phone,
            whatsapp_number=dto.whatsapp_number,
            address=dto.address,
            gender=dto.gender,
        )
        client = self._repo.save(client)
        logger.info("client.created", client_id=str(client.id))
        return client

    @transaction.atomic
    def update_client(self, id: str, dto: UpdateClientDTO) -> Client:
        """Update an existing client with the supplied fields.

        Raises:
            ClientNotFound: if the client does not exist.
            ClientAlreadyExists: if the new phone collides with another client.
        """
        client = self._repo.get_by_id(id)
        if not client:
            raise ClientNotFound(f"Client {id} not found.")

        if dto.phone is not None and dto.phone != client.phone:
            if self._repo.get_by_phone(dto.phone):
                logger.warning("client.duplicate_phone", client_id=str(id))
                raise ClientAlreadyExists("Phone number already registered.")

        for field in ("name", "phone", "whatsapp_number", "address", "gender"):
            value = getattr(dto, field)
            if value is not None:
                setattr(client, field, value)

        client = self._repo.save(client)
        logger.info("client.updated", client_id=str(id))
        return client

    @transaction.atomic
    def delete_client(self, id: str) -> None:
        """Remove a client that owns no orders.

        Raises:
            ClientNotFound: if the client does not exist.
            ClientHasOrders: if orders still reference the client.
        """
        client = self._repo.get_by_id(id)
        if not client:
            raise ClientNotFound(f"Client {id} not found.")
        if self._repo.has_orders(id):
            raise ClientHasOrders(f"Client {id} still has orders.")
        self._repo.delete(id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_clients(self, filters: Optional[Dict[str, Any]] = None) -> List[Client]:
        return self._repo.list(filters)

    def get_client(self, id: str) -> Client:
        """Raises ``ClientNotFound`` if the client does not exist."""
        client = self._repo.get_by_id(id)
        if not client:
            raise ClientNotFound(f"Client {id} not found.")
        return client
