"""Client URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.clients.views import ClientViewSet

router = DefaultRouter(trailing_slash=True)
router.register("clients", ClientViewSet, basename="client")

urlpatterns = router.urls
