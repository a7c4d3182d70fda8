"""Client API views.

Exposes the ``ClientService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into appropriate
HTTP status codes: the view never swallows generic exceptions.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.clients.dtos import CreateClientDTO, UpdateClientDTO
from modules.clients.exceptions import ClientAlreadyExists, ClientHasOrders, ClientNotFound
from modules.clients.filters import ClientFilter
from modules.clients.models import Client
from modules.clients.repositories.django_repository import ClientDjangoRepository
from modules.clients.serializers import ClientSerializer
from modules.clients.services import ClientService
from modules.core.pagination import StandardResultsSetPagination


class ClientViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for Client operations.

    Uses ``ClientService`` with ``ClientDjangoRepository`` (DIP).
    """

    filterset_class = ClientFilter
    search_fields = ["name", "phone", "whatsapp_number"]
    ordering_fields = ["created_at", "name"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    pagination_class = StandardResultsSetPagination
    queryset = Client.objects.all()
    serializer_class = ClientSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ClientService(repository=ClientDjangoRepository())

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/clients/{pk}/"""
        try:
            client = self._service.get_client(pk or "")
        except ClientNotFound:
            return Response(
                {"detail": "Client not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(ClientSerializer(client).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/clients/"""
        data = request.data
        try:
            dto = CreateClientDTO(
                name=data.get("name", ""),
                phone=data.get("phone", ""),
                whatsapp_number=data.get("whatsapp_number", ""),
                address=data.get("address", ""),
                gender=data.get("gender", ""),
            )
        except PydanticValidationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            client = self._service.create_client(dto)
        except ClientAlreadyExists as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)

        return Response(ClientSerializer(client).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/clients/{pk}/"""
        data = request.data
        try:
            dto = UpdateClientDTO(
                name=data.get("name"),
                phone=data.get("phone"),
                whatsapp_number=data.get("whatsapp_number"),
                address=data.get("address"),
                gender=data.get("gender"),
            )
        except PydanticValidationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            client = self._service.update_client(pk or "", dto)
        except ClientNotFound:
            return Response(
                {"detail": "Client not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        except ClientAlreadyExists as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)

        return Response(ClientSerializer(client).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/clients/{pk}/"""
        try:
            self._service.delete_client(pk or "")
        except ClientNotFound:
            return Response(
                {"detail": "Client not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        except ClientHasOrders as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        return Response(status=status.HTTP_204_NO_CONTENT)
