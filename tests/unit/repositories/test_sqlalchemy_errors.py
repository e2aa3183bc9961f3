from __future__ import annotations

import pytest
from sqlalchemy import exc as sa_exc

from imageai.db.db_models import TagModel
from imageai.exceptions import (
    ConflictError,
    DatabaseOperationError,
    handle_sqlalchemy_errors,
    is_unique_violation,
)


class DriverError(Exception):
    def __init__(self, *, sqlstate: str | None = None, sqlite_errorname: str | None = None) -> None:
        super().__init__("driver failure")
        self.sqlstate = sqlstate
        self.sqlite_errorname = sqlite_errorname


def integrity_error(**attrs) -> sa_exc.IntegrityError:
    return sa_exc.IntegrityError("INSERT INTO template_assets ...", {}, DriverError(**attrs))


def raise_inside_handler(error: Exception) -> None:
    with handle_sqlalchemy_errors(entity="asset"):
        raise error


def test_postgres_unique_violation_is_conflict() -> None:
    with pytest.raises(ConflictError) as exc_info:
        raise_inside_handler(integrity_error(sqlstate="23505"))

    assert exc_info.value.status_code == 409
    assert exc_info.value.message == "asset: already exists"


def test_postgres_foreign_key_violation_is_database_error() -> None:
    with pytest.raises(DatabaseOperationError):
        raise_inside_handler(integrity_error(sqlstate="23503"))


def test_sqlite_foreign_key_violation_is_database_error() -> None:
    error = integrity_error(sqlite_errorname="SQLITE_CONSTRAINT_FOREIGNKEY")

    assert not is_unique_violation(error)
    with pytest.raises(DatabaseOperationError):
        raise_inside_handler(error)


def test_data_errors_are_database_errors() -> None:
    error = sa_exc.DataError("INSERT INTO templates ...", {}, DriverError(sqlstate="22001"))

    with pytest.raises(DatabaseOperationError):
        raise_inside_handler(error)


def test_real_sqlite_unique_violation_is_conflict(session_factory) -> None:
    with session_factory() as session, session.begin():
        session.add(TagModel(slug="retro", name="retro"))

    with pytest.raises(ConflictError):
        with handle_sqlalchemy_errors(entity="tag"):
            with session_factory() as session, session.begin():
                session.add(TagModel(slug="retro", name="Retro"))


def test_other_exceptions_pass_through() -> None:
    with pytest.raises(ValueError):
        raise_inside_handler(ValueError("not a database error"))
