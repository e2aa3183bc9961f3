"""Upload validation utilities."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import UploadFile

from ..config import UploadLimits
from ..exceptions import PayloadTooLargeError, UnsupportedMediaTypeError
from .assets_models import UploadValidationResult

logger = logging.getLogger(__name__)

_SIGNATURES: tuple[tuple[bytes, str, str], ...] = (
    (b"\xff\xd8\xff", "image/jpeg", ".jpg"),
    (b"\x89PNG\r\n\x1a\n", "image/png", ".png"),
)


def sniff_image_type(head: bytes) -> tuple[str, str] | None:
    """Return ``(content_type, extension)`` from magic bytes, if recognised."""
    for signature, content_type, extension in _SIGNATURES:
        if head.startswith(signature):
            return content_type, extension
    return None


@dataclass(slots=True)
class UploadValidator:
    """Read an upload under the size ceiling and check its real content type."""

    limits: UploadLimits

    async def validate(self, upload: UploadFile) -> UploadValidationResult:
        cap = self.limits.max_upload_bytes
        chunks: list[bytes] = []
        size = 0
        try:
            while True:
                chunk = await upload.read(self.limits.chunk_size_bytes)
                if not chunk:
                    break
                size += len(chunk)
                if size > cap:
                    logger.warning(
                        "assets.upload.payload_too_large",
                        extra={"size_bytes": size, "limit_bytes": cap},
                    )
                    raise PayloadTooLargeError(f"file exceeds {cap} bytes")
                chunks.append(chunk)
        finally:
            await upload.close()

        data = b"".join(chunks)
        sniffed = sniff_image_type(data[:16])
        if sniffed is None or sniffed[0] not in self.limits.allowed_content_types:
            logger.warning(
                "assets.upload.unsupported_media",
                extra={"content_type": upload.content_type},
            )
            raise UnsupportedMediaTypeError("only JPEG and PNG images are accepted")

        content_type, extension = sniffed
        result = UploadValidationResult(
            content_type=content_type,
            extension=extension,
            size_bytes=size,
            filename=upload.filename or "upload",
            data=data,
        )
        logger.info(
            "assets.upload.validated",
            extra={
                "upload_filename": result.filename,
                "size_bytes": result.size_bytes,
                "content_type": result.content_type,
            },
        )
        return result
