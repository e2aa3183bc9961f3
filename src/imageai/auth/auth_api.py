"""Development-only login endpoints (enabled with DEV_AUTH_ENABLED=1)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from ..api.envelope import success_response
from ..exceptions import ForbiddenError, TooManyRequestsError, UnauthorizedError
from .auth_dependencies import get_authenticator, require_user
from .auth_service import (
    AuthDisabledError,
    DevAuthService,
    InvalidCredentialsError,
    LoginThrottledError,
    Principal,
)
from .authenticator import Authenticator

router = APIRouter(prefix="/v1/dev", tags=["dev-auth"])


class DevLoginRequest(BaseModel):
    email: str
    password: str


class DevLoginResponse(BaseModel):
    token: str
    email: str
    role: str = "admin"
    expires_in: int


class WhoAmIResponse(BaseModel):
    email: str | None
    role: str


def get_dev_auth_service(
    authenticator: Authenticator = Depends(get_authenticator),
) -> DevAuthService:
    if authenticator.dev is None:
        raise ForbiddenError("dev auth disabled")
    return authenticator.dev


def _client_ip(request: Request) -> str | None:
    if request.client:
        return request.client.host
    return None


@router.post("/login")
def login(
    payload: DevLoginRequest,
    request: Request,
    service: DevAuthService = Depends(get_dev_auth_service),
):
    try:
        token, expires_in = service.authenticate(
            email=payload.email,
            password=payload.password,
            client_ip=_client_ip(request),
        )
    except AuthDisabledError as exc:
        raise ForbiddenError(str(exc)) from exc
    except LoginThrottledError as exc:
        raise TooManyRequestsError(str(exc)) from exc
    except InvalidCredentialsError as exc:
        raise UnauthorizedError(str(exc)) from exc
    body = DevLoginResponse(token=token, email=payload.email.strip(), expires_in=expires_in)
    return success_response(request, body.model_dump())


@router.get("/whoami", dependencies=[Depends(get_dev_auth_service)])
def whoami(request: Request, principal: Principal = Depends(require_user)):
    body = WhoAmIResponse(email=principal.email, role=principal.role)
    return success_response(request, body.model_dump())
