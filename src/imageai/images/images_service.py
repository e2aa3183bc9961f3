"""Run a stored template prompt against an uploaded image."""

from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass
from pathlib import PurePosixPath

from ..assets.upload_validation import sniff_image_type
from ..exceptions import InvalidRequestError, NotFoundError
from ..providers.providers_base import ProviderDriver, ProviderRequest
from ..storage.blob_storage import LocalBlobStorage, stamped_filename
from ..templates.templates_repository import TemplateRepository

logger = logging.getLogger(__name__)

PROCESSED_SCOPE = "processed"


def _image_mime(path: str, data: bytes) -> str:
    sniffed = sniff_image_type(data[:16])
    if sniffed is not None:
        return sniffed[0]
    guessed, _ = mimetypes.guess_type(path)
    return guessed or "application/octet-stream"


def _extension_for(content_type: str) -> str:
    if content_type == "image/jpeg":
        return ".jpg"
    return mimetypes.guess_extension(content_type) or ".png"


@dataclass(slots=True)
class ImageProcessingService:
    templates: TemplateRepository
    storage: LocalBlobStorage
    driver: ProviderDriver

    async def process(self, template_slug: str, image_path: str) -> str:
        """Return the public URL of the processed image."""
        missing = [
            name
            for name, value in (("template_id", template_slug), ("image_path", image_path))
            if not (value or "").strip()
        ]
        if missing:
            raise InvalidRequestError(
                "template_id and image_path are required", details={"fields": missing}
            )
        template_slug = template_slug.strip()
        image_path = image_path.strip()

        if not self.storage.exists(image_path):
            raise NotFoundError("image not found")
        version = self.templates.get_current_version(template_slug)

        image = self.storage.read(image_path)
        image_mime = _image_mime(image_path, image)
        result = await self.driver.process(
            ProviderRequest(
                image=image,
                image_mime=image_mime,
                prompt=version.prompt_template,
                model=version.model_name or None,
                negative_prompt=version.negative_prompt,
                parameters=version.model_parameters,
                output_mime=version.output_mime,
            )
        )

        filename = stamped_filename(
            PurePosixPath(image_path).name, _extension_for(result.content_type)
        )
        url = self.storage.save(PROCESSED_SCOPE, filename, result.payload)
        self.templates.increment_usage(template_slug)
        logger.info(
            "images.processed",
            extra={
                "template": template_slug,
                "version": version.version,
                "processed_url": url,
            },
        )
        return url


__all__ = ["ImageProcessingService", "PROCESSED_SCOPE"]
