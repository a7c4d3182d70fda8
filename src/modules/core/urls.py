from django.urls import path

from modules.core.views import ReauthTokenView, health_check

urlpatterns = [
    path("health", health_check, name="health_check"),
    path("api/v1/auth/reauth/", ReauthTokenView.as_view(), name="reauth_token"),
]
