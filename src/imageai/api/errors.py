"""Exception handlers rendering every failure as an error envelope."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..exceptions import AppError
from .envelope import error_response

logger = logging.getLogger(__name__)

_HTTP_CODES = {
    status.HTTP_400_BAD_REQUEST: "invalid_request",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_409_CONFLICT: "conflict",
    413: "payload_too_large",
    status.HTTP_415_UNSUPPORTED_MEDIA_TYPE: "unsupported_media_type",
    status.HTTP_429_TOO_MANY_REQUESTS: "too_many_requests",
}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Convert :class:`AppError` subclasses into envelopes."""
    if exc.status_code >= 500:
        logger.error(
            "api.error %s",
            exc.message,
            extra={"code": exc.code, "path": request.url.path},
            exc_info=exc.__cause__ or exc,
        )
        message = exc.message if exc.code == "provider_error" else "internal server error"
        return error_response(
            request, status_code=exc.status_code, code=exc.code, message=message
        )
    logger.info(
        "api.client_error %s", exc.message, extra={"code": exc.code, "path": request.url.path}
    )
    return error_response(
        request,
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        details=exc.details,
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    code = _HTTP_CODES.get(exc.status_code, "internal_error")
    message = exc.detail if isinstance(exc.detail, str) else code.replace("_", " ")
    return error_response(
        request,
        status_code=exc.status_code,
        code=code,
        message=message,
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    fields = sorted(
        {
            ".".join(str(part) for part in error.get("loc", ())[1:]) or "body"
            for error in exc.errors()
        }
    )
    logger.info("api.invalid_request", extra={"path": request.url.path, "fields": fields})
    return error_response(
        request,
        status_code=status.HTTP_400_BAD_REQUEST,
        code="invalid_request",
        message="malformed request",
        details={"fields": fields},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("api.unhandled_exception", extra={"path": request.url.path}, exc_info=exc)
    return error_response(
        request,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code="internal_error",
        message="internal server error",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = [
    "app_error_handler",
    "http_exception_handler",
    "register_exception_handlers",
    "request_validation_handler",
    "unhandled_exception_handler",
]
