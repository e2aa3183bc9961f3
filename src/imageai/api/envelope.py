"""Uniform ``{success, data, error, meta}`` response envelope."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def _meta(request: Request | None) -> dict[str, str | None]:
    request_id = None
    if request is not None:
        request_id = getattr(request.state, "request_id", None)
    return {
        "request_id": request_id,
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
    }


def success_response(
    request: Request,
    data: Any = None,
    *,
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    content: dict[str, Any] = {"success": True, "meta": _meta(request)}
    if data is not None:
        content["data"] = jsonable_encoder(data)
    return JSONResponse(status_code=status_code, content=content)


def error_response(
    request: Request | None,
    *,
    status_code: int,
    code: str,
    message: str,
    details: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = jsonable_encoder(dict(details))
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, "meta": _meta(request)},
        headers=dict(headers or {}),
    )


__all__ = ["error_response", "success_response"]
