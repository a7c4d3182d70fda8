"""Storage API views.

Exposes drawer configuration and the occupancy overview.  Slot
suggestions for a single order live on the order endpoint
(``/orders/{id}/storage-suggestion/``).
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.storage.dtos import CreateDrawerDTO
from modules.storage.exceptions import DrawerAlreadyExists, DrawerNotEmpty, DrawerNotFound
from modules.storage.models import StorageDrawer
from modules.storage.repositories.django_repository import DrawerDjangoRepository
from modules.storage.serializers import (
    CreateDrawerSerializer,
    DrawerOccupancySerializer,
    StorageDrawerSerializer,
)
from modules.storage.services import StorageService


class StorageDrawerViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for drawer configuration."""

    queryset = StorageDrawer.objects.all()
    serializer_class = StorageDrawerSerializer
    pagination_class = None

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = StorageService(
            order_repository=OrderDjangoRepository(),
            drawer_repository=DrawerDjangoRepository(),
        )

    def create(self, request: Request) -> Response:
        """POST /api/v1/storage/drawers/"""
        serializer = CreateDrawerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = CreateDrawerDTO(**serializer.validated_data)
        except PydanticValidationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            drawer = self._service.create_drawer(dto)
        except DrawerAlreadyExists as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        return Response(StorageDrawerSerializer(drawer).data, status=status.HTTP_201_CREATED)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/storage/drawers/{pk}/"""
        try:
            self._service.delete_drawer(pk or "")
        except DrawerNotFound:
            return Response({"detail": "Drawer not found."}, status=status.HTTP_404_NOT_FOUND)
        except DrawerNotEmpty as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"])
    def overview(self, request: Request) -> Response:
        """GET /api/v1/storage/drawers/overview/"""
        overview = self._service.drawer_overview()
        return Response(DrawerOccupancySerializer(overview, many=True).data)

    @action(detail=False, methods=["get"], url_path="slot-status")
    def slot_status(self, request: Request) -> Response:
        """GET /api/v1/storage/drawers/slot-status/?location=A-03"""
        location = request.query_params.get("location", "").strip()
        if not location:
            return Response(
                {"detail": "Query parameter 'location' is required."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response({"location": location, "free": self._service.is_slot_free(location)})
