"""Pydantic schemas for template admin and public APIs."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from .templates_models import PublicTemplate, Template, TemplateInput


class TemplateWriteRequest(BaseModel):
    """Create/update body.

    Status and visibility default to empty strings so missing values are
    reported by field validation rather than by the request parser.
    """

    slug: str = ""
    name: str = ""
    description: str | None = None
    status: str = ""
    visibility: str = ""
    tags: list[str] = Field(default_factory=list)
    thumbnail_url: str | None = None

    def to_input(self) -> TemplateInput:
        return TemplateInput(
            slug=self.slug,
            name=self.name,
            description=self.description,
            status=self.status,
            visibility=self.visibility,
            tags=list(self.tags),
            thumbnail_url=self.thumbnail_url,
        )


class TemplatePayload(BaseModel):
    id: str
    slug: str
    name: str
    description: str | None = None
    status: str
    visibility: str
    published_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    usage_count: int = 0
    thumbnail_url: str | None = None
    tags: list[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, template: Template) -> "TemplatePayload":
        return cls(
            id=template.id,
            slug=template.slug,
            name=template.name,
            description=template.description,
            status=template.status,
            visibility=template.visibility,
            published_at=template.published_at,
            created_at=template.created_at,
            updated_at=template.updated_at,
            usage_count=template.usage_count,
            thumbnail_url=template.thumbnail_url,
            tags=list(template.tags),
        )


class TemplateListPayload(BaseModel):
    templates: list[TemplatePayload]


class PublicTemplatePayload(BaseModel):
    id: str
    name: str
    thumbnail_url: str | None = None
    published_at: datetime | None = None
    usage_count: int = 0

    @classmethod
    def from_domain(cls, template: PublicTemplate) -> "PublicTemplatePayload":
        return cls(
            id=template.id,
            name=template.name,
            thumbnail_url=template.thumbnail_url,
            published_at=template.published_at,
            usage_count=template.usage_count,
        )


class PublicTemplateListPayload(BaseModel):
    templates: list[PublicTemplatePayload]
