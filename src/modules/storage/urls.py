"""Storage URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.storage.views import StorageDrawerViewSet

router = DefaultRouter(trailing_slash=True)
router.register("storage/drawers", StorageDrawerViewSet, basename="drawer")

urlpatterns = router.urls
