"""Pydantic schemas for template asset routes."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from .assets_models import TemplateAsset


class AssetPayload(BaseModel):
    id: str
    template_id: str
    kind: str
    url: str
    sort_order: int
    created_at: datetime | None = None

    @classmethod
    def from_domain(cls, asset: TemplateAsset) -> "AssetPayload":
        return cls(
            id=asset.id,
            template_id=asset.template_id,
            kind=asset.kind,
            url=asset.url,
            sort_order=asset.sort_order,
            created_at=asset.created_at,
        )


class AssetListPayload(BaseModel):
    assets: list[AssetPayload]


class AssetUpdateRequest(BaseModel):
    kind: str | None = None
    sort_order: int | None = None
