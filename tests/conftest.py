from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from imageai.config import StorageSettings
from imageai.storage.blob_storage import LocalBlobStorage
from imageai.templates.templates_repository import TemplateRepository
from tests.helpers.app_factory import build_app, build_engine


@pytest.fixture
def session_factory():
    engine, factory = build_engine()
    yield factory
    engine.dispose()


@pytest.fixture
def template_repo(session_factory) -> TemplateRepository:
    return TemplateRepository(session_factory)


@pytest.fixture
def storage(tmp_path) -> LocalBlobStorage:
    root = tmp_path / "assets"
    root.mkdir(exist_ok=True)
    return LocalBlobStorage(StorageSettings(root=root, base_url="/assets"))


@pytest.fixture
def app(tmp_path):
    return build_app(tmp_path)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
