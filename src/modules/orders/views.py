"""Order API views.

Exposes the ``OrderStatusService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into appropriate
HTTP status codes: the view never swallows generic exceptions.

| Exception                | Status |
|--------------------------|--------|
| ValidationError          | 400    |
| IllegalTransitionError   | 400    |
| AuthenticationError      | 403    |
| OrderNotFound            | 404    |
| PersistenceError         | 503    |
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.clients.exceptions import ClientNotFound
from modules.clients.repositories.django_repository import ClientDjangoRepository
from modules.core.authentication import ReauthTokenService
from modules.core.pagination import StandardResultsSetPagination
from modules.orders.constants import ATTACHMENT_FIELDS, SYSTEM_USER
from modules.orders.dtos import CreateOrderDTO, SplitOrderDTO
from modules.orders.exceptions import (
    AuthenticationError,
    IllegalTransitionError,
    OrderNotFound,
    PersistenceError,
    ValidationError,
)
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    CancelOrderSerializer,
    CreateOrderSerializer,
    OrderListSerializer,
    OrderSerializer,
    RevertOrderSerializer,
    SplitOrderSerializer,
    form_input,
)
from modules.orders.services import OrderStatusService
from modules.storage.repositories.django_repository import DrawerDjangoRepository
from modules.storage.services import StorageService

DOMAIN_ERRORS = (
    ValidationError,
    IllegalTransitionError,
    AuthenticationError,
    OrderNotFound,
    PersistenceError,
)


def domain_error_response(exc: Exception) -> Response:
    """Translate a domain exception into an HTTP response."""
    if isinstance(exc, ValidationError):
        return Response(
            {"detail": str(exc), "missing_fields": list(exc.missing_fields)},
            status=status.HTTP_400_BAD_REQUEST,
        )
    if isinstance(exc, IllegalTransitionError):
        return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
    if isinstance(exc, AuthenticationError):
        return Response({"detail": str(exc)}, status=status.HTTP_403_FORBIDDEN)
    if isinstance(exc, OrderNotFound):
        return Response({"detail": "Order not found."}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(exc, PersistenceError):
        return Response(
            {"detail": str(exc)}, status=status.HTTP_503_SERVICE_UNAVAILABLE
        )
    raise exc


def acting_user(request: Request) -> str:
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        return SYSTEM_USER
    return user.get_username()


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderStatusService`` with injected repositories (DIP).
    Does **not** extend ``ModelViewSet``: all writes go through
    the service/repository layer.
    """

    queryset = Order.objects.select_related("client")
    filterset_class = OrderFilter
    search_fields = ["local_order_id", "global_order_id", "tracking_number", "client__name"]
    ordering_fields = ["created_at", "order_date", "status", "price_in_mru"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._order_repo = OrderDjangoRepository()
        self._service = OrderStatusService(
            order_repository=self._order_repo,
            reauthenticator=ReauthTokenService(),
            client_repository=ClientDjangoRepository(),
        )

    def get_throttles(self) -> list[BaseThrottle]:
        """Throttling scopes per action."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/"""
        create_serializer = CreateOrderSerializer(data=request.data)
        create_serializer.is_valid(raise_exception=True)

        data = dict(create_serializer.validated_data)
        if not data.get("local_order_id"):
            data.pop("local_order_id", None)
        try:
            dto = CreateOrderDTO(**data)
        except PydanticValidationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            order = self._service.create_order(dto, user=acting_user(request))
        except ClientNotFound:
            return Response(
                {"detail": "Client not found."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)

        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        Filtering (status, client, shipment, drawer, date range) is handled
        by ``OrderFilter``.  Results are paginated.
        """
        queryset = self.filter_queryset(self.get_queryset())

        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(queryset, request)
        serializer = OrderListSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order(pk or "")
        except OrderNotFound as exc:
            return domain_error_response(exc)
        return Response(OrderSerializer(order).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/

        Edits order details.  Status, storage and other lifecycle fields
        are refused; use the lifecycle actions for those.
        """
        try:
            order = self._service.update_details(
                pk or "",
                form_input(request.data, ("product_links", "product_images")),
                user=acting_user(request),
            )
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"])
    def advance(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/advance/

        Body: the input required by the order's current status, e.g.
        ``{"weight": "2.5", "storage_location": "A-03"}`` at
        ``arrived_at_office``.
        """
        try:
            order = self._service.advance(
                pk or "",
                form_input(request.data, ATTACHMENT_FIELDS),
                user=acting_user(request),
            )
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def revert(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/revert/  Body: ``{"proof": "<re-auth token>"}``"""
        serializer = RevertOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            order = self._service.revert(
                pk or "",
                serializer.validated_data["proof"],
                user=acting_user(request),
            )
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/cancel/  Body: ``{"reason": "..."}``"""
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            order = self._service.cancel(
                pk or "",
                serializer.validated_data["reason"],
                user=acting_user(request),
            )
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def split(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/split/"""
        serializer = SplitOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = SplitOrderDTO(**serializer.validated_data)
        except PydanticValidationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            original, created = self._service.split(pk or "", dto, user=acting_user(request))
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)
        return Response(
            {
                "original": OrderSerializer(original).data,
                "new_order": OrderSerializer(created).data,
            },
            status=status.HTTP_201_CREATED,
        )

    # ------------------------------------------------------------------
    # Storage and billing
    # ------------------------------------------------------------------

    @action(detail=True, methods=["get"], url_path="storage-suggestion")
    def storage_suggestion(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/storage-suggestion/"""
        storage_service = StorageService(
            order_repository=self._order_repo,
            drawer_repository=DrawerDjangoRepository(),
        )
        try:
            suggestion = storage_service.suggest_for_order(pk or "")
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)
        return Response(suggestion.as_dict())

    @action(detail=True, methods=["get"])
    def invoice(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/invoice/"""
        try:
            invoice = self._service.invoice(pk or "")
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)
        return Response(invoice.model_dump(mode="json"))

    @action(detail=False, methods=["get"], url_path="billing-summary")
    def billing_summary(self, request: Request) -> Response:
        """GET /api/v1/orders/billing-summary/

        Accepts the same filters as the order list.
        """
        queryset = self.filter_queryset(self.get_queryset())
        summary = self._service.billing_summary({"id__in": queryset.values("id")})
        return Response(summary.model_dump(mode="json"))
