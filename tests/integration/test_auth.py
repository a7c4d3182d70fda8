"""Integration tests for API authentication.

Validates:
  - /health is public (plain Django view, no DRF).
  - Protected DRF endpoints return 401 without or with an invalid token.
  - Re-auth tokens are issued only for the correct password.
  - Staff-only endpoints refuse regular users.
"""

import pytest

pytestmark = pytest.mark.integration


class TestPublicEndpoints:
    def test_health_is_public(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestProtectedEndpoints:
    """All DRF endpoints require a valid JWT by default (Fail Closed)."""

    @pytest.mark.parametrize(
        "url",
        ["/api/v1/orders/", "/api/v1/clients/", "/api/v1/storage/drawers/"],
    )
    def test_no_token_returns_401(self, api_client, url):
        assert api_client.get(url).status_code == 401

    def test_invalid_token_returns_401(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Bearer invalid.token.here")
        assert api_client.get("/api/v1/orders/").status_code == 401

    def test_malformed_auth_header_returns_401(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Token some-token")
        assert api_client.get("/api/v1/orders/").status_code == 401

    def test_401_includes_www_authenticate_header(self, api_client):
        response = api_client.get("/api/v1/orders/")
        assert response.status_code == 401
        assert "Bearer" in response.get("WWW-Authenticate", "")

    def test_jwt_login_flow(self, api_client, clerk):
        response = api_client.post(
            "/api/v1/auth/token/",
            {"username": "clerk", "password": "clerk-pass-123"},
            format="json",
        )
        assert response.status_code == 200

        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        assert api_client.get("/api/v1/orders/").status_code == 200


class TestReauthEndpoint:
    def test_issues_token(self, auth_client):
        response = auth_client.post(
            "/api/v1/auth/reauth/", {"password": "clerk-pass-123"}, format="json"
        )
        assert response.status_code == 200
        assert response.data["token"]
        assert response.data["expires_in"] > 0

    def test_wrong_password(self, auth_client):
        response = auth_client.post(
            "/api/v1/auth/reauth/", {"password": "nope"}, format="json"
        )
        assert response.status_code == 403

    def test_password_required(self, auth_client):
        response = auth_client.post("/api/v1/auth/reauth/", {}, format="json")
        assert response.status_code == 400

    def test_requires_session(self, api_client):
        response = api_client.post(
            "/api/v1/auth/reauth/", {"password": "x"}, format="json"
        )
        assert response.status_code == 401


def test_activity_log_is_staff_only(auth_client):
    assert auth_client.get("/api/v1/activity-log/").status_code == 403
