"""User registration route."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from ..api.envelope import success_response
from ..auth.auth_dependencies import require_user
from ..auth.auth_service import Principal
from ..exceptions import InvalidRequestError
from .users_repository import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/users", tags=["users"])


class RegisterUserRequest(BaseModel):
    name: str = ""
    email: str | None = None
    avatar_url: str | None = None


class RegisterUserResponse(BaseModel):
    user_id: str
    message: str = "User registered/updated successfully."


def get_user_repo(request: Request) -> UserRepository:
    try:
        return request.app.state.user_repo  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("UserRepository is not configured") from exc


def _resolve_email(principal: Principal, body: RegisterUserRequest) -> str:
    """Prefer the verified email asserted by the identity provider over the body."""
    token_email = (principal.email or "").strip().lower()
    if token_email and principal.email_verified:
        return token_email
    return (body.email or "").strip().lower() or token_email


@router.post("/register")
def register_user(
    body: RegisterUserRequest,
    request: Request,
    principal: Principal = Depends(require_user),
    repo: UserRepository = Depends(get_user_repo),
):
    email = _resolve_email(principal, body)
    name = body.name.strip()
    missing = [field for field, value in (("name", name), ("email", email)) if not value]
    if missing:
        raise InvalidRequestError("name and email are required", details={"fields": missing})

    avatar_url = (body.avatar_url or "").strip() or None
    profile = repo.upsert(email=email, name=name, avatar_url=avatar_url)
    logger.info("users.registered", extra={"email": profile.email, "uid": principal.uid})
    return success_response(request, RegisterUserResponse(user_id=profile.email).model_dump())
