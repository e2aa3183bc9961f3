"""Development admin login and HS256 token issuance."""

from __future__ import annotations

import hmac
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
import structlog
from jwt import ExpiredSignatureError
from jwt import InvalidTokenError as PyJWTInvalidTokenError

from ..config import AuthSettings

logger = structlog.get_logger(__name__)

DEV_ISSUER = "imageai-dev"


def _utcnow() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(tz=timezone.utc)


@dataclass(slots=True)
class Principal:
    """Authenticated caller resolved from a bearer token."""

    uid: str
    email: str | None = None
    email_verified: bool = False
    provider: str = "firebase"
    claims: dict[str, Any] = field(default_factory=dict)

    @property
    def role(self) -> str:
        return str(self.claims.get("role") or "user")


@dataclass(slots=True)
class FailedLoginState:
    """Tracks consecutive failures and throttle window per email."""

    failures: int = 0
    blocked_until: datetime | None = None


class AuthError(Exception):
    """Base class for auth failures."""


class AuthDisabledError(AuthError):
    """Raised when dev auth is off or has no credentials configured."""


class InvalidCredentialsError(AuthError):
    """Raised when email/password mismatch."""


class LoginThrottledError(AuthError):
    """Raised when the caller hit the throttle limit."""


class InvalidTokenError(AuthError):
    """Raised when token cannot be decoded."""


class TokenExpiredError(AuthError):
    """Raised when token is expired."""


@dataclass(slots=True)
class DevAuthService:
    """Authenticate the single configured dev admin and issue JWT tokens."""

    admin_email: str
    admin_password: str
    signing_key: str
    token_ttl: timedelta
    max_failures: int = 10
    block_duration: timedelta = timedelta(minutes=15)
    _failed_logins: dict[str, FailedLoginState] = field(default_factory=dict)

    @classmethod
    def from_settings(cls, settings: AuthSettings) -> "DevAuthService":
        # Without a configured key tokens only live as long as the process.
        signing_key = settings.dev_jwt_signing_key or secrets.token_hex(32)
        return cls(
            admin_email=settings.dev_admin_email.strip(),
            admin_password=settings.dev_admin_password.strip(),
            signing_key=signing_key,
            token_ttl=timedelta(hours=settings.dev_jwt_ttl_hours),
        )

    def authenticate(
        self, email: str, password: str, client_ip: str | None = None
    ) -> tuple[str, int]:
        """Validate credentials and return JWT token + ttl seconds."""
        if not self.admin_email or not self.admin_password:
            raise AuthDisabledError("dev admin credentials not configured")

        email = email.strip()
        now = _utcnow()
        state = self._failed_logins.get(email)
        if state and state.blocked_until and now < state.blocked_until:
            logger.warning(
                "auth.dev_login.failure",
                email=email,
                reason="throttled",
                blocked_until=state.blocked_until.isoformat(),
                client_ip=client_ip,
            )
            raise LoginThrottledError("Too many attempts, try later")

        email_ok = hmac.compare_digest(email.encode(), self.admin_email.encode())
        password_ok = hmac.compare_digest(password.strip().encode(), self.admin_password.encode())
        if not (email_ok and password_ok):
            self._register_failure(email, now)
            logger.warning(
                "auth.dev_login.failure",
                email=email,
                reason="invalid_credentials",
                client_ip=client_ip,
            )
            raise InvalidCredentialsError("invalid email or password")

        self._failed_logins.pop(email, None)
        token = self._issue_token(email, now)
        expires_in = int(self.token_ttl.total_seconds())
        logger.info("auth.dev_login.success", email=email, client_ip=client_ip)
        return token, expires_in

    def _register_failure(self, email: str, now: datetime) -> None:
        state = self._failed_logins.setdefault(email, FailedLoginState())
        state.failures += 1
        if state.failures >= self.max_failures:
            state.failures = 0
            state.blocked_until = now + self.block_duration
        else:
            state.blocked_until = None

    def _issue_token(self, email: str, issued_at: datetime) -> str:
        payload: dict[str, Any] = {
            "sub": email,
            "email": email,
            "role": "admin",
            "iss": DEV_ISSUER,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.token_ttl).timestamp()),
        }
        return jwt.encode(payload, self.signing_key, algorithm="HS256")

    def validate_token(self, token: str) -> Principal:
        """Decode a dev JWT into a :class:`Principal`."""
        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self.signing_key,
                algorithms=["HS256"],
                issuer=DEV_ISSUER,
                options={"require": ["exp", "iat", "sub", "iss"]},
            )
        except ExpiredSignatureError as exc:
            raise TokenExpiredError("Token expired") from exc
        except PyJWTInvalidTokenError as exc:
            raise InvalidTokenError("Invalid token") from exc
        return Principal(
            uid=str(payload["sub"]),
            email=payload.get("email"),
            email_verified=True,
            provider="dev",
            claims=payload,
        )


__all__ = [
    "AuthDisabledError",
    "AuthError",
    "DevAuthService",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "LoginThrottledError",
    "Principal",
    "TokenExpiredError",
]
