"""Helpers for dealing with PostgreSQL DSN formats."""

from __future__ import annotations

from typing import Mapping

from psycopg import conninfo
from sqlalchemy.engine import URL, make_url

_LIBPQ_KEYS = ("host", "port", "dbname", "user", "password")


def _coerce_port(value: str | int | None) -> int | None:
    if value in (None, ""):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid PostgreSQL port value: {value!r}") from exc


def _normalize_drivername(drivername: str | None) -> str:
    if not drivername or drivername in {"postgresql", "postgres"}:
        return "postgresql+psycopg"
    return drivername


def _url_from_libpq(mapping: Mapping[str, str]) -> URL:
    query = {k: v for k, v in mapping.items() if k not in _LIBPQ_KEYS}
    return URL.create(
        drivername="postgresql+psycopg",
        username=mapping.get("user") or None,
        password=mapping.get("password") or None,
        host=mapping.get("host") or None,
        port=_coerce_port(mapping.get("port")),
        database=mapping.get("dbname") or None,
        query=query,
    )


def normalize_postgres_dsn(raw_dsn: str) -> str:
    """Return a SQLAlchemy URL (psycopg driver) for a URL or libpq style DSN."""

    raw = raw_dsn.strip()
    if not raw:
        raise ValueError("PostgreSQL DSN must be a non-empty string")

    if "://" in raw:
        # make_url rejects the bare "postgres" scheme used by some hosting providers.
        if raw.startswith("postgres://"):
            raw = "postgresql://" + raw[len("postgres://") :]
        url = make_url(raw)
        url = url.set(drivername=_normalize_drivername(url.drivername))
        return url.render_as_string(hide_password=False)

    mapping = conninfo.conninfo_to_dict(raw)
    url = _url_from_libpq({k: str(v) for k, v in mapping.items() if v is not None})
    return url.render_as_string(hide_password=False)


def compose_postgres_url(
    *,
    host: str,
    port: str | int,
    user: str,
    password: str,
    dbname: str,
    sslmode: str | None = None,
) -> str:
    """Build a psycopg SQLAlchemy URL from discrete connection settings."""

    query = {"sslmode": sslmode} if sslmode else {}
    url = URL.create(
        drivername="postgresql+psycopg",
        username=user or None,
        password=password or None,
        host=host or None,
        port=_coerce_port(port),
        database=dbname or None,
        query=query,
    )
    return url.render_as_string(hide_password=False)


__all__ = ["compose_postgres_url", "normalize_postgres_dsn"]
