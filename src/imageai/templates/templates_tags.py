"""Tag normalisation and template/tag link reconciliation."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from ..db.db_models import TagModel, TemplateTagModel
from .templates_models import TagMode

logger = logging.getLogger(__name__)


def normalize_tags(tags: Iterable[str] | None) -> list[str]:
    """Trim, drop empties and de-duplicate keeping first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for raw in tags or ():
        tag = raw.strip()
        if not tag or tag in seen:
            continue
        seen.add(tag)
        result.append(tag)
    return result


def split_tag_csv(raw: str | None) -> list[str]:
    if not raw:
        return []
    return normalize_tags(raw.split(","))


_INSERTS = {"postgresql": postgresql.insert, "sqlite": sqlite.insert}


def _insert_ignore(session: Session, model: type, **values: object) -> None:
    """INSERT ... ON CONFLICT DO NOTHING on dialects that support it."""
    insert = _INSERTS.get(session.get_bind().dialect.name)
    if insert is not None:
        session.execute(insert(model).values(**values).on_conflict_do_nothing())
        return
    session.merge(model(**values))
    session.flush()


def _upsert_tag(session: Session, slug: str) -> int:
    tag_id = session.scalar(select(TagModel.id).where(TagModel.slug == slug))
    if tag_id is None:
        _insert_ignore(session, TagModel, slug=slug, name=slug)
        tag_id = session.scalar(select(TagModel.id).where(TagModel.slug == slug))
    return tag_id


def reconcile_tags(
    session: Session,
    template_id: str,
    tags: Sequence[str] | None,
    mode: TagMode,
) -> list[str]:
    """Link ``tags`` to the template inside the caller's transaction.

    ``REPLACE`` clears every existing link first so the owned set becomes
    exactly the requested one. Returns the normalised tag list.
    """
    normalized = normalize_tags(tags)
    if mode is TagMode.REPLACE:
        session.execute(
            delete(TemplateTagModel).where(TemplateTagModel.template_id == template_id)
        )

    for slug in normalized:
        tag_id = _upsert_tag(session, slug)
        _insert_ignore(session, TemplateTagModel, template_id=template_id, tag_id=tag_id)

    logger.debug(
        "templates.tags.reconciled",
        extra={"template_id": template_id, "mode": mode.value, "tags": normalized},
    )
    return normalized


def load_tags(session: Session, template_ids: Sequence[str]) -> dict[str, list[str]]:
    """Return tag slugs per template id, alphabetically ordered."""
    result: dict[str, list[str]] = {template_id: [] for template_id in template_ids}
    if not template_ids:
        return result
    rows = session.execute(
        select(TemplateTagModel.template_id, TagModel.slug)
        .join(TagModel, TagModel.id == TemplateTagModel.tag_id)
        .where(TemplateTagModel.template_id.in_(template_ids))
        .order_by(TemplateTagModel.template_id, TagModel.slug)
    )
    for template_id, slug in rows:
        result[template_id].append(slug)
    return result


__all__ = ["load_tags", "normalize_tags", "reconcile_tags", "split_tag_csv"]
