"""Common authentication dependencies for FastAPI routers."""

from __future__ import annotations

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..exceptions import ForbiddenError, UnauthorizedError
from .auth_service import InvalidTokenError, Principal, TokenExpiredError
from .authenticator import Authenticator

security = HTTPBearer(auto_error=False)


def get_authenticator(request: Request) -> Authenticator:
    try:
        return request.app.state.authenticator  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("Authenticator is not configured") from exc


def require_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    authenticator: Authenticator = Depends(get_authenticator),
) -> Principal:
    if credentials is None or not credentials.credentials.strip():
        raise UnauthorizedError("missing Authorization bearer token")

    try:
        principal = authenticator.authenticate(credentials.credentials.strip())
    except TokenExpiredError as exc:
        raise UnauthorizedError("token expired") from exc
    except InvalidTokenError as exc:
        raise UnauthorizedError("invalid token") from exc
    request.state.principal = principal
    return principal


def require_admin_user(
    principal: Principal = Depends(require_user),
    authenticator: Authenticator = Depends(get_authenticator),
) -> Principal:
    if not authenticator.is_admin(principal):
        raise ForbiddenError("admin privileges required")
    return principal


__all__ = ["get_authenticator", "require_admin_user", "require_user", "security"]
