"""Firebase ID token verification using Google's published signing keys."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import jwt
import structlog
from jwt import ExpiredSignatureError, PyJWKClient, PyJWKClientError
from jwt import InvalidTokenError as PyJWTInvalidTokenError

from .auth_service import InvalidTokenError, Principal, TokenExpiredError

logger = structlog.get_logger(__name__)

FIREBASE_JWKS_URL = (
    "https://www.googleapis.com/service_accounts/v1/jwk/"
    "securetoken@system.gserviceaccount.com"
)


@dataclass(slots=True)
class FirebaseTokenVerifier:
    """Verify RS256 Firebase ID tokens issued for ``project_id``."""

    project_id: str
    jwks_url: str = FIREBASE_JWKS_URL
    leeway_seconds: int = 10
    _jwk_client: PyJWKClient | None = field(default=None, repr=False)

    @property
    def issuer(self) -> str:
        return f"https://securetoken.google.com/{self.project_id}"

    def _client(self) -> PyJWKClient:
        if self._jwk_client is None:
            self._jwk_client = PyJWKClient(self.jwks_url, cache_keys=True)
        return self._jwk_client

    def _signing_key(self, token: str) -> Any:
        try:
            return self._client().get_signing_key_from_jwt(token).key
        except (PyJWKClientError, PyJWTInvalidTokenError) as exc:
            raise InvalidTokenError("Unknown signing key") from exc

    def verify(self, token: str) -> Principal:
        key = self._signing_key(token)
        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                key,
                algorithms=["RS256"],
                audience=self.project_id,
                issuer=self.issuer,
                leeway=self.leeway_seconds,
                options={"require": ["exp", "iat", "sub", "aud", "iss"]},
            )
        except ExpiredSignatureError as exc:
            raise TokenExpiredError("Token expired") from exc
        except PyJWTInvalidTokenError as exc:
            logger.info("auth.firebase.rejected", reason=str(exc))
            raise InvalidTokenError("Invalid token") from exc

        if not payload.get("sub"):
            raise InvalidTokenError("Token has empty subject")
        return Principal(
            uid=str(payload["sub"]),
            email=payload.get("email"),
            email_verified=bool(payload.get("email_verified")),
            provider="firebase",
            claims=payload,
        )


__all__ = ["FIREBASE_JWKS_URL", "FirebaseTokenVerifier"]
