"""Application configuration builder."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .db.db_init import init_db
from .utils.postgres_dsn import compose_postgres_url, normalize_postgres_dsn

DEFAULT_MAX_UPLOAD_BYTES = 12 * 1024 * 1024


@dataclass(slots=True)
class UploadLimits:
    allowed_content_types: Sequence[str] = ("image/jpeg", "image/png")
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    chunk_size_bytes: int = 1024 * 1024


@dataclass(slots=True)
class StorageSettings:
    root: Path
    base_url: str = "/assets"


@dataclass(slots=True)
class GeminiSettings:
    api_key: str | None = None
    api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout_seconds: float = 60.0
    default_model: str = "gemini-2.5-flash-image"


@dataclass(slots=True)
class AuthSettings:
    firebase_project_id: str | None = None
    admin_claim_key: str = "admin"
    admin_emails: frozenset[str] = frozenset()
    dev_auth_enabled: bool = False
    dev_admin_email: str = ""
    dev_admin_password: str = ""
    dev_jwt_signing_key: str = ""
    dev_jwt_ttl_hours: int = 12


@dataclass(slots=True)
class CorsSettings:
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])
    allowed_headers: list[str] = field(
        default_factory=lambda: ["Authorization", "Content-Type"]
    )
    allowed_methods: list[str] = field(
        default_factory=lambda: ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    )


@dataclass(slots=True)
class AppConfig:
    database_url: str
    engine: Engine
    session_factory: sessionmaker[Session]
    storage: StorageSettings
    upload_limits: UploadLimits
    gemini: GeminiSettings
    auth: AuthSettings
    cors: CorsSettings
    port: int = 8080
    log_level: str = "INFO"


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: Sequence[str]) -> list[str]:
    raw = os.getenv(name)
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def resolve_database_url() -> str:
    """Return DATABASE_URL or a PostgreSQL URL composed from DB_* variables."""
    raw = os.getenv("DATABASE_URL", "").strip()
    if raw:
        if raw.startswith("sqlite"):
            return raw
        return normalize_postgres_dsn(raw)
    return compose_postgres_url(
        host=os.getenv("DB_HOST", "localhost"),
        port=os.getenv("DB_PORT", "5432"),
        user=os.getenv("DB_USER", "imageai"),
        password=os.getenv("DB_PASSWORD", "imageai_pass"),
        dbname=os.getenv("DB_NAME", "imageai_db"),
        sslmode=os.getenv("DB_SSLMODE", "disable"),
    )


def build_session_factory(database_url: str) -> tuple[Engine, sessionmaker[Session]]:
    engine = create_engine(database_url, future=True, pool_pre_ping=True)
    session_factory: sessionmaker[Session] = sessionmaker(
        bind=engine, expire_on_commit=False
    )
    return engine, session_factory


def load_config(*, create_schema: bool = True) -> AppConfig:
    """Load configuration from environment (.env.local and .env are honoured)."""
    load_dotenv(".env.local")
    load_dotenv(".env", override=False)

    storage = StorageSettings(
        root=Path(os.getenv("ASSETS_DIR", "./var/assets")),
        base_url=os.getenv("ASSETS_BASE_URL", "/assets").rstrip("/") or "/assets",
    )
    storage.root.mkdir(parents=True, exist_ok=True)

    upload_limits = UploadLimits(
        max_upload_bytes=int(
            os.getenv("ASSET_MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES)
        ),
    )

    gemini = GeminiSettings(
        api_key=os.getenv("GEMINI_API_KEY") or None,
        api_base=os.getenv(
            "GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"
        ),
        timeout_seconds=float(os.getenv("GEMINI_TIMEOUT_SECONDS", 60)),
    )

    auth = AuthSettings(
        firebase_project_id=os.getenv("FIREBASE_PROJECT_ID") or None,
        admin_claim_key=os.getenv("ADMIN_CLAIM_KEY", "admin") or "admin",
        admin_emails=frozenset(
            email.lower() for email in _env_list("ADMIN_EMAILS", ())
        ),
        dev_auth_enabled=_env_flag("DEV_AUTH_ENABLED"),
        dev_admin_email=os.getenv("DEV_ADMIN_EMAIL", ""),
        dev_admin_password=os.getenv("DEV_ADMIN_PASSWORD", ""),
        dev_jwt_signing_key=os.getenv("DEV_JWT_SIGNING_KEY", ""),
        dev_jwt_ttl_hours=int(os.getenv("DEV_JWT_TTL_HOURS", 12)),
    )

    defaults = CorsSettings()
    cors = CorsSettings(
        allowed_origins=_env_list("CORS_ALLOWED_ORIGINS", defaults.allowed_origins),
        allowed_headers=_env_list("CORS_ALLOWED_HEADERS", defaults.allowed_headers),
        allowed_methods=_env_list("CORS_ALLOWED_METHODS", defaults.allowed_methods),
    )

    database_url = resolve_database_url()
    engine, session_factory = build_session_factory(database_url)
    if create_schema:
        init_db(engine)

    return AppConfig(
        database_url=database_url,
        engine=engine,
        session_factory=session_factory,
        storage=storage,
        upload_limits=upload_limits,
        gemini=gemini,
        auth=auth,
        cors=cors,
        port=int(os.getenv("PORT", 8080)),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
