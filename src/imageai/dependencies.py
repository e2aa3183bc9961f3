"""Dependency wiring helpers."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from .api.health import router as health_router
from .assets.assets_api import router as assets_router
from .assets.assets_repository import AssetRepository
from .assets.assets_service import AssetService
from .assets.upload_validation import UploadValidator
from .auth.auth_api import router as dev_auth_router
from .auth.authenticator import Authenticator
from .config import AppConfig
from .images.images_api import router as images_router
from .images.images_service import ImageProcessingService
from .providers.providers_gemini import GeminiDriver
from .storage.blob_storage import LocalBlobStorage
from .templates.public_templates_api import router as public_templates_router
from .templates.templates_api import router as templates_router
from .templates.templates_repository import TemplateRepository
from .users.users_api import router as users_router
from .users.users_repository import UserRepository


def include_routers(app: FastAPI, config: AppConfig) -> None:
    """Mount module routers and attach services."""
    template_repo = TemplateRepository(config.session_factory)
    asset_repo = AssetRepository(config.session_factory)
    user_repo = UserRepository(config.session_factory)
    storage = LocalBlobStorage(config.storage)
    asset_service = AssetService(
        repo=asset_repo,
        storage=storage,
        validator=UploadValidator(config.upload_limits),
    )
    image_service = ImageProcessingService(
        templates=template_repo,
        storage=storage,
        driver=GeminiDriver(config.gemini),
    )

    app.state.config = config
    app.state.template_repo = template_repo
    app.state.asset_repo = asset_repo
    app.state.user_repo = user_repo
    app.state.storage = storage
    app.state.asset_service = asset_service
    app.state.image_service = image_service
    app.state.authenticator = Authenticator.from_settings(config.auth)

    app.include_router(health_router)
    app.include_router(templates_router)
    app.include_router(assets_router)
    app.include_router(public_templates_router)
    app.include_router(users_router)
    app.include_router(images_router)
    if config.auth.dev_auth_enabled:
        app.include_router(dev_auth_router)

    if config.storage.base_url.startswith("/") and config.storage.root.exists():
        app.mount(
            config.storage.base_url,
            StaticFiles(directory=config.storage.root),
            name="assets",
        )
