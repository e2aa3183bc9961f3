from __future__ import annotations

import io

import pytest
from fastapi import UploadFile

from imageai.assets.assets_repository import AssetRepository
from imageai.assets.assets_service import AssetService, ensure_kind
from imageai.assets.upload_validation import UploadValidator
from imageai.config import UploadLimits
from imageai.exceptions import (
    ConflictError,
    NotFoundError,
    UnsupportedMediaTypeError,
    ValidationFailedError,
)
from tests.helpers.app_factory import PNG_BYTES, make_input


class FailingAssetRepository(AssetRepository):
    def create_asset(self, slug, *, kind, url, sort_order=None):
        raise ConflictError("template_asset: already exists")


def build_service(repo, storage) -> AssetService:
    return AssetService(repo=repo, storage=storage, validator=UploadValidator(UploadLimits()))


def make_upload(data: bytes = PNG_BYTES) -> UploadFile:
    return UploadFile(file=io.BytesIO(data), filename="Photo.png")


def test_ensure_kind() -> None:
    assert ensure_kind(" cover ") == "cover"
    with pytest.raises(ValidationFailedError) as exc_info:
        ensure_kind("banner")
    assert exc_info.value.fields == ["kind"]


@pytest.mark.asyncio
async def test_upload_stores_file_and_creates_row(session_factory, template_repo, storage) -> None:
    template_repo.create(make_input())
    service = build_service(AssetRepository(session_factory), storage)

    asset = await service.upload("retro-portrait", kind="thumbnail", upload=make_upload())

    assert asset.kind == "thumbnail"
    assert asset.url.startswith("/assets/templates/retro-portrait/Photo-")
    assert asset.url.endswith(".png")
    assert storage.read(asset.url) == PNG_BYTES
    assert template_repo.get("retro-portrait").thumbnail_url == asset.url


@pytest.mark.asyncio
async def test_upload_checks_kind_before_template(session_factory, storage) -> None:
    service = build_service(AssetRepository(session_factory), storage)

    with pytest.raises(ValidationFailedError):
        await service.upload("missing", kind="", upload=make_upload())


@pytest.mark.asyncio
async def test_upload_to_missing_template_raises(session_factory, storage) -> None:
    service = build_service(AssetRepository(session_factory), storage)

    with pytest.raises(NotFoundError):
        await service.upload("missing", kind="cover", upload=make_upload())


@pytest.mark.asyncio
async def test_rejected_upload_writes_nothing(session_factory, template_repo, storage) -> None:
    template_repo.create(make_input())
    service = build_service(AssetRepository(session_factory), storage)

    with pytest.raises(UnsupportedMediaTypeError):
        await service.upload("retro-portrait", kind="cover", upload=make_upload(b"plain text"))

    assert list(storage.iter_files("templates")) == []


@pytest.mark.asyncio
async def test_failed_insert_removes_stored_file(session_factory, template_repo, storage) -> None:
    template_repo.create(make_input())
    service = build_service(FailingAssetRepository(session_factory), storage)

    with pytest.raises(ConflictError):
        await service.upload("retro-portrait", kind="cover", upload=make_upload())

    assert list(storage.iter_files("templates")) == []
