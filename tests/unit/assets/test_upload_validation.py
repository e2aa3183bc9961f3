from __future__ import annotations

import io

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from imageai.assets.upload_validation import UploadValidator, sniff_image_type
from imageai.config import UploadLimits
from imageai.exceptions import PayloadTooLargeError, UnsupportedMediaTypeError
from tests.helpers.app_factory import JPEG_BYTES, PNG_BYTES


def make_upload(data: bytes, *, filename: str = "photo.png", content_type: str = "image/png") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(data),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


def test_sniff_image_type() -> None:
    assert sniff_image_type(PNG_BYTES) == ("image/png", ".png")
    assert sniff_image_type(JPEG_BYTES) == ("image/jpeg", ".jpg")
    assert sniff_image_type(b"GIF89a") is None


@pytest.mark.asyncio
async def test_validate_accepts_png() -> None:
    validator = UploadValidator(UploadLimits(max_upload_bytes=1024, chunk_size_bytes=16))

    result = await validator.validate(make_upload(PNG_BYTES))

    assert result.content_type == "image/png"
    assert result.extension == ".png"
    assert result.size_bytes == len(PNG_BYTES)
    assert result.data == PNG_BYTES


@pytest.mark.asyncio
async def test_validate_uses_content_not_declared_type() -> None:
    validator = UploadValidator(UploadLimits())

    result = await validator.validate(
        make_upload(JPEG_BYTES, filename="photo.png", content_type="image/png")
    )

    assert result.content_type == "image/jpeg"
    assert result.extension == ".jpg"


@pytest.mark.asyncio
async def test_validate_rejects_oversized_upload() -> None:
    validator = UploadValidator(UploadLimits(max_upload_bytes=32, chunk_size_bytes=8))

    with pytest.raises(PayloadTooLargeError):
        await validator.validate(make_upload(PNG_BYTES))


@pytest.mark.asyncio
async def test_validate_rejects_unknown_content() -> None:
    validator = UploadValidator(UploadLimits())

    with pytest.raises(UnsupportedMediaTypeError):
        await validator.validate(make_upload(b"GIF89a" + b"\x00" * 10, content_type="image/png"))
