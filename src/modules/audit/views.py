"""Audit log API views (read-only, staff only)."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.permissions import IsAdminUser
from rest_framework.viewsets import GenericViewSet

from modules.audit.filters import ActivityLogFilter
from modules.audit.models import ActivityLogEntry
from modules.audit.serializers import ActivityLogEntrySerializer
from modules.core.pagination import StandardResultsSetPagination


class ActivityLogViewSet(ListModelMixin, GenericViewSet):
    """GET /api/v1/activity-log/"""

    queryset = ActivityLogEntry.objects.all()
    serializer_class = ActivityLogEntrySerializer
    permission_classes = [IsAdminUser]
    filterset_class = ActivityLogFilter
    search_fields = ["details", "action", "user"]
    ordering_fields = ["timestamp"]
    ordering = ["-timestamp"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    pagination_class = StandardResultsSetPagination
