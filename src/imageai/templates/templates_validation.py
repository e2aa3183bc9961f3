"""Input validation for template create/update requests.

The validators are pure: they inspect a :class:`TemplateInput` and return
the names of every offending field (empty list when valid). Callers turn a
non-empty result into a single :class:`ValidationFailedError`.
"""

from __future__ import annotations

import re
from typing import Iterable

from ..exceptions import ValidationFailedError
from .templates_models import TemplateInput, TemplateStatus, Visibility

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")

# Column widths of templates.slug, tags.slug and templates.name.
MAX_SLUG_LENGTH = 128
MAX_TAG_LENGTH = 64
MAX_NAME_LENGTH = 255

ALLOWED_STATUSES = frozenset(status.value for status in TemplateStatus)
ALLOWED_VISIBILITIES = frozenset(visibility.value for visibility in Visibility)


def is_valid_slug(value: str | None, *, max_length: int = MAX_SLUG_LENGTH) -> bool:
    if not value or len(value) > max_length:
        return False
    return SLUG_PATTERN.fullmatch(value) is not None


def _invalid_tags(tags: Iterable[str]) -> bool:
    return any(not is_valid_slug(tag.strip(), max_length=MAX_TAG_LENGTH) for tag in tags)


def _common_fields(payload: TemplateInput) -> list[str]:
    fields: list[str] = []
    name = (payload.name or "").strip()
    if not name or len(name) > MAX_NAME_LENGTH:
        fields.append("name")
    if payload.status not in ALLOWED_STATUSES:
        fields.append("status")
    if payload.visibility not in ALLOWED_VISIBILITIES:
        fields.append("visibility")
    if _invalid_tags(payload.tags):
        fields.append("tags[]")
    return fields


def validate_create(payload: TemplateInput) -> list[str]:
    """Return invalid field names for a create request."""
    fields: list[str] = []
    if not is_valid_slug(payload.slug):
        fields.append("slug")
    fields.extend(_common_fields(payload))
    return fields


def validate_update(payload: TemplateInput) -> list[str]:
    """Return invalid field names for an update request (slug is immutable)."""
    return _common_fields(payload)


def ensure_valid(fields: list[str]) -> None:
    if fields:
        raise ValidationFailedError(fields)


__all__ = [
    "ALLOWED_STATUSES",
    "ALLOWED_VISIBILITIES",
    "MAX_NAME_LENGTH",
    "MAX_SLUG_LENGTH",
    "MAX_TAG_LENGTH",
    "SLUG_PATTERN",
    "ensure_valid",
    "is_valid_slug",
    "validate_create",
    "validate_update",
]
