from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from imageai.auth.auth_service import InvalidTokenError, Principal
from imageai.auth.authenticator import Authenticator
from imageai.config import (
    AppConfig,
    AuthSettings,
    CorsSettings,
    GeminiSettings,
    StorageSettings,
    UploadLimits,
)
from imageai.db.db_init import init_db
from imageai.main import create_app
from imageai.templates.templates_models import TemplateInput

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64

USER = Principal(uid="user-1", email="user@example.com", email_verified=True)
ADMIN = Principal(
    uid="admin-1",
    email="admin@example.com",
    email_verified=True,
    claims={"admin": True},
)

USER_HEADERS = {"Authorization": "Bearer user-token"}
ADMIN_HEADERS = {"Authorization": "Bearer admin-token"}


class StubFirebaseVerifier:
    """Maps fixed bearer tokens to principals instead of checking signatures."""

    def __init__(self, principals: dict[str, Principal] | None = None) -> None:
        self.principals = principals or {"user-token": USER, "admin-token": ADMIN}

    def verify(self, token: str) -> Principal:
        try:
            return self.principals[token]
        except KeyError as exc:
            raise InvalidTokenError("Invalid token") from exc


def build_engine() -> tuple[Engine, sessionmaker[Session]]:
    # One shared connection so TestClient worker threads see the same in-memory db.
    engine = create_engine(
        "sqlite://",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    init_db(engine)
    return engine, sessionmaker(bind=engine, expire_on_commit=False)


def build_config(tmp_path: Path, *, auth: AuthSettings | None = None) -> AppConfig:
    engine, session_factory = build_engine()
    root = tmp_path / "assets"
    root.mkdir(parents=True, exist_ok=True)
    return AppConfig(
        database_url="sqlite://",
        engine=engine,
        session_factory=session_factory,
        storage=StorageSettings(root=root, base_url="/assets"),
        upload_limits=UploadLimits(max_upload_bytes=1024, chunk_size_bytes=256),
        gemini=GeminiSettings(api_key="test-key"),
        auth=auth or AuthSettings(),
        cors=CorsSettings(),
    )


def build_app(tmp_path: Path, *, auth: AuthSettings | None = None) -> FastAPI:
    config = build_config(tmp_path, auth=auth)
    app = create_app(config)
    app.state.authenticator = Authenticator(
        firebase=StubFirebaseVerifier(),  # type: ignore[arg-type]
        dev=app.state.authenticator.dev,
        admin_claim_key=config.auth.admin_claim_key,
        admin_emails=config.auth.admin_emails,
    )
    return app


def make_input(slug: str = "retro-portrait", **overrides) -> TemplateInput:
    values = {
        "slug": slug,
        "name": slug.replace("-", " ").title(),
        "status": "draft",
        "visibility": "public",
    }
    values.update(overrides)
    return TemplateInput(**values)
