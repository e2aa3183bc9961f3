"""Asset upload orchestration: validate, store bytes, insert the row."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import UploadFile

from ..exceptions import AppError, NotFoundError, ValidationFailedError
from ..storage.blob_storage import LocalBlobStorage, stamped_filename
from .assets_models import ALLOWED_ASSET_KINDS, TemplateAsset
from .assets_repository import AssetRepository
from .upload_validation import UploadValidator

logger = logging.getLogger(__name__)


def ensure_kind(kind: str | None) -> str:
    value = (kind or "").strip()
    if value not in ALLOWED_ASSET_KINDS:
        raise ValidationFailedError(["kind"])
    return value


@dataclass(slots=True)
class AssetService:
    repo: AssetRepository
    storage: LocalBlobStorage
    validator: UploadValidator

    async def upload(
        self,
        slug: str,
        *,
        kind: str,
        upload: UploadFile,
        sort_order: int | None = None,
    ) -> TemplateAsset:
        kind = ensure_kind(kind)
        if not self.repo.template_exists(slug):
            raise NotFoundError(f"template '{slug}' not found")

        validated = await self.validator.validate(upload)
        filename = stamped_filename(validated.filename, validated.extension)
        url = self.storage.save(f"templates/{slug}", filename, validated.data)
        try:
            return self.repo.create_asset(slug, kind=kind, url=url, sort_order=sort_order)
        except AppError:
            # The row never landed, so the freshly written file has no owner.
            self.storage.delete_url(url)
            logger.warning("assets.upload.rolled_back", extra={"slug": slug, "url": url})
            raise


__all__ = ["AssetService", "ensure_kind"]
