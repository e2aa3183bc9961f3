"""Template domain dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any


class TemplateStatus(StrEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class Visibility(StrEnum):
    PUBLIC = "public"
    PRIVATE = "private"


class TagMode(StrEnum):
    """How a requested tag set is applied to a template."""

    ADDITIVE = "additive"
    REPLACE = "replace"


@dataclass(slots=True)
class TemplateInput:
    """Create/update payload after transport decoding.

    ``slug`` is ignored on update; the path parameter identifies the row.
    """

    name: str
    status: str
    visibility: str
    slug: str = ""
    description: str | None = None
    tags: list[str] = field(default_factory=list)
    thumbnail_url: str | None = None


@dataclass(slots=True)
class Template:
    id: str
    slug: str
    name: str
    status: str
    visibility: str
    description: str | None = None
    published_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    usage_count: int = 0
    thumbnail_url: str | None = None
    tags: list[str] = field(default_factory=list)


@dataclass(slots=True)
class PublicTemplate:
    """Listing entry exposed to end users; never carries prompt data."""

    id: str
    name: str
    thumbnail_url: str | None = None
    published_at: datetime | None = None
    usage_count: int = 0


@dataclass(slots=True)
class TemplateVersion:
    id: str
    template_id: str
    version: int
    prompt_template: str
    model_provider: str
    model_name: str
    output_mime: str = "image/png"
    negative_prompt: str | None = None
    model_parameters: dict[str, Any] = field(default_factory=dict)
