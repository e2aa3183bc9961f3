"""FastAPI application entry point.

Serve with ``uvicorn imageai.main:create_app --factory`` or the
``imageai-api`` console script.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI

from .api.errors import register_exception_handlers
from .api.middleware import install_middleware
from .config import AppConfig, load_config
from .dependencies import include_routers
from .logging import configure_logging

logger = logging.getLogger(__name__)


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Build FastAPI instance with configured dependencies."""
    cfg = config or load_config()
    configure_logging(cfg.log_level)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "app.started",
            extra={
                "dev_auth": cfg.auth.dev_auth_enabled,
                "firebase": bool(cfg.auth.firebase_project_id),
                "assets_dir": str(cfg.storage.root),
            },
        )
        yield
        cfg.engine.dispose()

    app = FastAPI(title="ImageAI Backend", lifespan=lifespan)
    register_exception_handlers(app)
    install_middleware(app, cfg.cors)
    include_routers(app, cfg)
    return app


def run() -> None:
    cfg = load_config()
    uvicorn.run(create_app(cfg), host="0.0.0.0", port=cfg.port)
