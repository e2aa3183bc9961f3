"""Domain level exceptions and helpers for repository layers.

Every error carries the machine readable ``code`` and the HTTP status the
API layer renders it with, so callers never classify failures by message.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Sequence

from sqlalchemy import exc as sa_exc

__all__ = [
    "AppError",
    "InvalidRequestError",
    "ValidationFailedError",
    "NotFoundError",
    "ConflictError",
    "ThumbnailRequiredError",
    "PayloadTooLargeError",
    "UnsupportedMediaTypeError",
    "UnauthorizedError",
    "ForbiddenError",
    "ProviderError",
    "TooManyRequestsError",
    "DatabaseOperationError",
    "handle_sqlalchemy_errors",
    "is_unique_violation",
]


class AppError(Exception):
    """Base class for application specific errors."""

    code = "internal_error"
    status_code = 500

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidRequestError(AppError):
    """Raised when the request body or parameters are malformed."""

    code = "invalid_request"
    status_code = 400


class ValidationFailedError(AppError):
    """Raised when one or more input fields fail validation."""

    code = "validation_error"
    status_code = 422

    def __init__(self, fields: Sequence[str], message: str = "validation failed") -> None:
        super().__init__(message, details={"fields": list(fields)})
        self.fields = list(fields)


class NotFoundError(AppError):
    """Raised when a record could not be located."""

    code = "not_found"
    status_code = 404


class ConflictError(AppError):
    """Raised when a unique constraint is violated."""

    code = "conflict"
    status_code = 409


class ThumbnailRequiredError(AppError):
    """Raised when publishing a template that owns no thumbnail."""

    code = "validation_thumbnail_required"
    status_code = 422

    def __init__(self, message: str = "thumbnail required for publish") -> None:
        super().__init__(
            message, details={"fields": ["thumbnail_url"], "message": message}
        )


class PayloadTooLargeError(AppError):
    """Raised when an upload exceeds the configured ceiling."""

    code = "payload_too_large"
    status_code = 413


class UnsupportedMediaTypeError(AppError):
    """Raised when upload content is neither JPEG nor PNG."""

    code = "unsupported_media_type"
    status_code = 415


class UnauthorizedError(AppError):
    code = "unauthorized"
    status_code = 401


class ForbiddenError(AppError):
    code = "forbidden"
    status_code = 403


class TooManyRequestsError(AppError):
    code = "too_many_requests"
    status_code = 429


class ProviderError(AppError):
    """Raised when the generative provider fails to return an image."""

    code = "provider_error"
    status_code = 502


class DatabaseOperationError(AppError):
    """Raised for unexpected database errors."""


@dataclass(slots=True)
class _EntityContext:
    """Internal helper describing the entity for error messages."""

    entity: str | None = None

    def format(self, message: str) -> str:
        if self.entity:
            return f"{self.entity}: {message}"
        return message


# SQLSTATE 23505 on PostgreSQL; sqlite3 extended result codes on SQLite.
_UNIQUE_SQLSTATE = "23505"
_SQLITE_UNIQUE_ERRORS = frozenset({"SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY"})


def is_unique_violation(exc: sa_exc.IntegrityError) -> bool:
    """Return True when the driver reports a unique or primary key violation."""
    orig = exc.orig
    if getattr(orig, "sqlstate", None) == _UNIQUE_SQLSTATE:
        return True
    return getattr(orig, "sqlite_errorname", None) in _SQLITE_UNIQUE_ERRORS


def _translate_sqlalchemy_error(exc: sa_exc.DBAPIError, *, context: _EntityContext) -> AppError:
    if isinstance(exc, sa_exc.IntegrityError) and is_unique_violation(exc):
        return ConflictError(context.format("already exists"))
    return DatabaseOperationError(context.format("database operation failed"))


@contextmanager
def handle_sqlalchemy_errors(*, entity: str | None = None) -> Iterator[None]:
    """Translate SQLAlchemy errors into domain specific ones."""

    context = _EntityContext(entity)
    try:
        yield
    except sa_exc.DBAPIError as exc:
        raise _translate_sqlalchemy_error(exc, context=context) from exc
