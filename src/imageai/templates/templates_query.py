"""Allow-listed filter and sort composition for template listings."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Mapping, Sequence

from sqlalchemy import Select, or_, select
from sqlalchemy.sql.elements import ColumnElement, Label

from ..db.db_models import TagModel, TemplateAssetModel, TemplateModel, TemplateTagModel
from .templates_models import TemplateStatus, Visibility

DEFAULT_LIMIT = 20

ADMIN_DEFAULT_SORT = "updated"
PUBLIC_DEFAULT_SORT = "newest"

ADMIN_SORTS: Mapping[str, tuple[ColumnElement, ...]] = {
    "updated": (TemplateModel.updated_at.desc(),),
    "newest": (
        TemplateModel.published_at.desc().nulls_last(),
        TemplateModel.created_at.desc(),
    ),
    "popular": (TemplateModel.usage_count.desc(), TemplateModel.updated_at.desc()),
    "name": (TemplateModel.name.asc(),),
}

PUBLIC_SORTS: Mapping[str, tuple[ColumnElement, ...]] = {
    "newest": (
        TemplateModel.published_at.desc().nulls_last(),
        TemplateModel.created_at.desc(),
    ),
    "popular": (
        TemplateModel.usage_count.desc(),
        TemplateModel.published_at.desc().nulls_last(),
    ),
    "name": (TemplateModel.name.asc(),),
}


@dataclass(slots=True)
class TemplateFilter:
    q: str | None = None
    tags: Sequence[str] = field(default_factory=tuple)
    status: str | None = None
    visibility: str | None = None
    sort: str | None = None
    limit: int = DEFAULT_LIMIT
    offset: int = 0

    def normalized(self) -> "TemplateFilter":
        """Return a copy with pagination defaults applied."""
        return replace(
            self,
            q=(self.q or "").strip() or None,
            limit=self.limit if self.limit > 0 else DEFAULT_LIMIT,
            offset=self.offset if self.offset > 0 else 0,
        )


def thumbnail_url_column() -> Label:
    """Correlated lookup of the lowest sort-order thumbnail per template row."""
    return (
        select(TemplateAssetModel.url)
        .where(
            TemplateAssetModel.template_id == TemplateModel.id,
            TemplateAssetModel.kind == "thumbnail",
        )
        .order_by(TemplateAssetModel.sort_order, TemplateAssetModel.id)
        .limit(1)
        .correlate(TemplateModel)
        .scalar_subquery()
        .label("thumbnail_url")
    )


def _apply_search(stmt: Select, flt: TemplateFilter) -> Select:
    if flt.q:
        stmt = stmt.where(
            or_(
                TemplateModel.name.icontains(flt.q, autoescape=True),
                TemplateModel.slug.icontains(flt.q, autoescape=True),
            )
        )
    if flt.tags:
        has_tag = (
            select(TemplateTagModel.template_id)
            .join(TagModel, TagModel.id == TemplateTagModel.tag_id)
            .where(
                TemplateTagModel.template_id == TemplateModel.id,
                TagModel.slug.in_(list(flt.tags)),
            )
            .correlate(TemplateModel)
            .exists()
        )
        stmt = stmt.where(has_tag)
    return stmt


def _order_by(
    stmt: Select,
    sorts: Mapping[str, tuple[ColumnElement, ...]],
    key: str | None,
    default: str,
) -> Select:
    ordering = sorts.get((key or "").strip().lower(), sorts[default])
    return stmt.order_by(*ordering, TemplateModel.slug.asc())


def build_admin_query(flt: TemplateFilter) -> Select:
    """Select ``(TemplateModel, thumbnail_url)`` rows for the admin listing."""
    flt = flt.normalized()
    stmt = select(TemplateModel, thumbnail_url_column())
    stmt = _apply_search(stmt, flt)
    if flt.status:
        stmt = stmt.where(TemplateModel.status == flt.status)
    if flt.visibility:
        stmt = stmt.where(TemplateModel.visibility == flt.visibility)
    stmt = _order_by(stmt, ADMIN_SORTS, flt.sort, ADMIN_DEFAULT_SORT)
    return stmt.limit(flt.limit).offset(flt.offset)


def build_public_query(flt: TemplateFilter) -> Select:
    """Select the public projection; status/visibility filters are fixed."""
    flt = flt.normalized()
    stmt = select(
        TemplateModel.slug,
        TemplateModel.name,
        thumbnail_url_column(),
        TemplateModel.published_at,
        TemplateModel.usage_count,
    ).where(
        TemplateModel.status == TemplateStatus.PUBLISHED.value,
        TemplateModel.visibility == Visibility.PUBLIC.value,
    )
    stmt = _apply_search(stmt, flt)
    stmt = _order_by(stmt, PUBLIC_SORTS, flt.sort, PUBLIC_DEFAULT_SORT)
    return stmt.limit(flt.limit).offset(flt.offset)


def parse_page_param(raw: str | None) -> int:
    """Lenient integer parsing; anything unparsable falls back to 0."""
    try:
        return int((raw or "").strip())
    except ValueError:
        return 0


__all__ = [
    "ADMIN_SORTS",
    "DEFAULT_LIMIT",
    "PUBLIC_SORTS",
    "TemplateFilter",
    "build_admin_query",
    "build_public_query",
    "parse_page_param",
    "thumbnail_url_column",
]
