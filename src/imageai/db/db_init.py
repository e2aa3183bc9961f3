"""Database initialization helpers."""

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.engine import Engine

from .db_models import Base


def init_db(engine: Engine) -> None:
    """Create tables that do not exist yet; alembic owns later schema changes."""
    if engine.dialect.name == "sqlite":
        enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(engine)


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """SQLite ignores FOREIGN KEY clauses unless the pragma is set per connection."""

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, _record) -> None:  # pragma: no cover - sqlite only
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
