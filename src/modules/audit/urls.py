"""Audit URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.audit.views import ActivityLogViewSet

router = DefaultRouter(trailing_slash=True)
router.register("activity-log", ActivityLogViewSet, basename="activity-log")

urlpatterns = router.urls
