"""Template asset domain dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class AssetKind(StrEnum):
    THUMBNAIL = "thumbnail"
    COVER = "cover"
    PREVIEW = "preview"


ALLOWED_ASSET_KINDS = frozenset(kind.value for kind in AssetKind)


@dataclass(slots=True)
class TemplateAsset:
    id: str
    template_id: str
    kind: str
    url: str
    sort_order: int
    created_at: datetime | None = None


@dataclass(slots=True)
class UploadValidationResult:
    content_type: str
    extension: str
    size_bytes: int
    filename: str
    data: bytes
