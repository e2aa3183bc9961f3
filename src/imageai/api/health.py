"""Liveness and database readiness probe."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..exceptions import DatabaseOperationError
from .envelope import success_response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request):
    engine = request.app.state.config.engine
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("health.database_unavailable", exc_info=exc)
        raise DatabaseOperationError("database unavailable") from exc
    return success_response(request, {"status": "ok"})
