"""Re-authentication tokens for sensitive actions.

Reverting an order status requires proof that the acting user still
controls the session.  Instead of resubmitting credentials with every
sensitive request, the user exchanges their password once for a
short-lived signed token (PyJWT, HS256) bound to their username and to a
scope.  Sensitive operations receive the token as ``proof`` and verify it
through ``IReauthenticator``.

Security decisions
------------------
* **Fail Closed**: any decode / validation error is an ``AuthenticationError``.
* ``algorithms`` is hard-coded; never derived from the incoming token.
* Tokens carry ``token_type="reauth"`` so a regular access token can never
  be replayed as a re-auth proof.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt as pyjwt
import structlog
from django.conf import settings
from django.contrib.auth import authenticate
from jwt.exceptions import PyJWTError

logger = structlog.get_logger(__name__)

REAUTH_ALGORITHM = "HS256"
REAUTH_TOKEN_TYPE = "reauth"
SCOPE_ORDER_REVERT = "order.revert"


class AuthenticationError(Exception):
    """Re-authentication of the acting user failed."""


class IReauthenticator(ABC):
    """Auth collaborator contract used by the order engine."""

    @abstractmethod
    def reauthenticate(self, identity: str, proof: str) -> None:
        """Verify *proof* for *identity*; raise ``AuthenticationError`` if invalid."""


class ReauthTokenService(IReauthenticator):
    """Issues and verifies scoped, short-lived re-auth tokens."""

    def __init__(
        self,
        signing_key: Optional[str] = None,
        lifetime_seconds: Optional[int] = None,
        scope: str = SCOPE_ORDER_REVERT,
    ) -> None:
        self._signing_key = signing_key or settings.SECRET_KEY
        self._lifetime = timedelta(
            seconds=lifetime_seconds or settings.REAUTH_TOKEN_LIFETIME
        )
        self._scope = scope

    @property
    def lifetime_seconds(self) -> int:
        return int(self._lifetime.total_seconds())

    def issue(self, username: str, password: str) -> str:
        """Check the password of *username* and return a fresh token."""
        user = authenticate(username=username, password=password)
        if user is None:
            logger.warning("reauth.password_rejected", username=username)
            raise AuthenticationError("Re-authentication failed.")

        now = datetime.now(timezone.utc)
        payload = {
            "sub": username,
            "scope": self._scope,
            "token_type": REAUTH_TOKEN_TYPE,
            "iat": now,
            "exp": now + self._lifetime,
        }
        logger.info("reauth.token_issued", username=username, scope=self._scope)
        return pyjwt.encode(payload, self._signing_key, algorithm=REAUTH_ALGORITHM)

    def reauthenticate(self, identity: str, proof: str) -> None:
        if not proof:
            raise AuthenticationError("Re-authentication proof is required.")
        try:
            payload = pyjwt.decode(
                proof,
                self._signing_key,
                algorithms=[REAUTH_ALGORITHM],
                options={"require": ["exp", "sub"]},
            )
        except PyJWTError as exc:
            logger.warning("reauth.token_invalid", username=identity, error=str(exc))
            raise AuthenticationError(f"Re-authentication failed: {exc}") from exc

        if payload.get("token_type") != REAUTH_TOKEN_TYPE:
            raise AuthenticationError("Token is not a re-authentication token.")
        if payload.get("scope") != self._scope:
            raise AuthenticationError("Token scope does not allow this action.")
        if payload.get("sub") != identity:
            logger.warning(
                "reauth.identity_mismatch",
                username=identity,
                token_subject=payload.get("sub"),
            )
            raise AuthenticationError("Token was issued to another user.")
