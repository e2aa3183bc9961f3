"""Resolve bearer tokens to principals and apply the admin policy."""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from ..config import AuthSettings
from .auth_service import AuthError, DevAuthService, InvalidTokenError, Principal
from .firebase_verifier import FirebaseTokenVerifier

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class Authenticator:
    firebase: FirebaseTokenVerifier | None = None
    dev: DevAuthService | None = None
    admin_claim_key: str = "admin"
    admin_emails: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_settings(cls, settings: AuthSettings) -> "Authenticator":
        firebase = None
        if settings.firebase_project_id:
            firebase = FirebaseTokenVerifier(settings.firebase_project_id)
        dev = DevAuthService.from_settings(settings) if settings.dev_auth_enabled else None
        if firebase is None and dev is None:
            logger.warning("auth.not_configured")
        return cls(
            firebase=firebase,
            dev=dev,
            admin_claim_key=settings.admin_claim_key,
            admin_emails=settings.admin_emails,
        )

    def authenticate(self, token: str) -> Principal:
        """Try dev tokens first (when enabled), then Firebase."""
        last_error: AuthError = InvalidTokenError("Invalid token")
        if self.dev is not None:
            try:
                return self.dev.validate_token(token)
            except AuthError as exc:
                last_error = exc
        if self.firebase is not None:
            return self.firebase.verify(token)
        raise last_error

    def is_admin(self, principal: Principal) -> bool:
        if principal.provider == "dev" and principal.role == "admin":
            return True
        if principal.claims.get(self.admin_claim_key) is True:
            return True
        email = (principal.email or "").strip().lower()
        return bool(email) and email in self.admin_emails


__all__ = ["Authenticator"]
