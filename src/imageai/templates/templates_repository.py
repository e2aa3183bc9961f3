"""Template repository backed by SQLAlchemy.

Each public method runs in a single transaction: validation has already
happened, and the template row, its tag links and the optional thumbnail
asset either all commit or all roll back.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from ..db.db_models import (
    TemplateAssetModel,
    TemplateModel,
    TemplateTagModel,
    TemplateVersionModel,
    utcnow,
)
from ..exceptions import NotFoundError, ThumbnailRequiredError, handle_sqlalchemy_errors
from .templates_models import (
    PublicTemplate,
    TagMode,
    Template,
    TemplateInput,
    TemplateStatus,
    TemplateVersion,
)
from .templates_query import TemplateFilter, build_admin_query, build_public_query
from .templates_tags import load_tags, normalize_tags, reconcile_tags

logger = logging.getLogger(__name__)


def find_template(session: Session, slug: str) -> TemplateModel:
    """Load a template row by slug or raise :class:`NotFoundError`."""
    row = session.scalar(select(TemplateModel).where(TemplateModel.slug == slug))
    if row is None:
        raise NotFoundError(f"template '{slug}' not found")
    return row


def upsert_thumbnail(session: Session, template_id: str, url: str | None) -> None:
    """Point the template's primary thumbnail at ``url`` (blank urls are ignored)."""
    url = (url or "").strip()
    if not url:
        return
    existing = session.scalar(
        select(TemplateAssetModel)
        .where(
            TemplateAssetModel.template_id == template_id,
            TemplateAssetModel.kind == "thumbnail",
        )
        .order_by(TemplateAssetModel.sort_order, TemplateAssetModel.id)
        .limit(1)
    )
    if existing is not None:
        existing.url = url
    else:
        session.add(
            TemplateAssetModel(
                template_id=template_id, kind="thumbnail", url=url, sort_order=0
            )
        )
    session.flush()


def _thumbnail_for(session: Session, template_id: str) -> str | None:
    return session.scalar(
        select(TemplateAssetModel.url)
        .where(
            TemplateAssetModel.template_id == template_id,
            TemplateAssetModel.kind == "thumbnail",
        )
        .order_by(TemplateAssetModel.sort_order, TemplateAssetModel.id)
        .limit(1)
    )


class TemplateRepository:
    """Persist templates, their tag links and lifecycle transitions."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def list_admin(self, flt: TemplateFilter) -> Sequence[Template]:
        with self._session_factory() as session:
            rows = session.execute(build_admin_query(flt)).all()
            tags = load_tags(session, [row.id for row, _ in rows])
            return [
                self._to_domain(row, thumbnail_url=thumbnail, tags=tags[row.id])
                for row, thumbnail in rows
            ]

    def list_public(self, flt: TemplateFilter) -> Sequence[PublicTemplate]:
        with self._session_factory() as session:
            rows = session.execute(build_public_query(flt)).all()
            return [
                PublicTemplate(
                    id=slug,
                    name=name,
                    thumbnail_url=thumbnail_url,
                    published_at=published_at,
                    usage_count=usage_count or 0,
                )
                for slug, name, thumbnail_url, published_at, usage_count in rows
            ]

    def get(self, slug: str) -> Template:
        with self._session_factory() as session:
            row = find_template(session, slug)
            return self._load(session, row)

    def create(self, payload: TemplateInput) -> Template:
        now = utcnow()
        with handle_sqlalchemy_errors(entity="template"):
            with self._session_factory() as session, session.begin():
                row = TemplateModel(
                    slug=payload.slug,
                    name=payload.name.strip(),
                    description=payload.description,
                    status=payload.status,
                    visibility=payload.visibility,
                    published_at=now if payload.status == TemplateStatus.PUBLISHED else None,
                    created_at=now,
                    updated_at=now,
                )
                session.add(row)
                session.flush()
                reconcile_tags(session, row.id, payload.tags, TagMode.ADDITIVE)
                upsert_thumbnail(session, row.id, payload.thumbnail_url)
                template = self._load(session, row)
        logger.info(
            "templates.created", extra={"slug": template.slug, "status": template.status}
        )
        return template

    def update(self, slug: str, payload: TemplateInput) -> Template:
        now = utcnow()
        with handle_sqlalchemy_errors(entity="template"):
            with self._session_factory() as session, session.begin():
                row = find_template(session, slug)
                row.name = payload.name.strip()
                row.description = payload.description
                row.status = payload.status
                row.visibility = payload.visibility
                if payload.status == TemplateStatus.PUBLISHED:
                    row.published_at = row.published_at or now
                else:
                    row.published_at = None
                row.updated_at = now
                session.flush()
                reconcile_tags(session, row.id, payload.tags, TagMode.REPLACE)
                upsert_thumbnail(session, row.id, payload.thumbnail_url)
                template = self._load(session, row)
        logger.info("templates.updated", extra={"slug": slug, "status": template.status})
        return template

    def publish(self, slug: str) -> Template:
        """Publish only while a non-empty thumbnail exists, in one statement."""
        now = utcnow()
        has_thumbnail = (
            select(TemplateAssetModel.id)
            .where(
                TemplateAssetModel.template_id == TemplateModel.id,
                TemplateAssetModel.kind == "thumbnail",
                func.trim(TemplateAssetModel.url) != "",
            )
            .correlate(TemplateModel)
            .exists()
        )
        with handle_sqlalchemy_errors(entity="template"):
            with self._session_factory() as session, session.begin():
                result = session.execute(
                    update(TemplateModel)
                    .where(TemplateModel.slug == slug, has_thumbnail)
                    .values(
                        status=TemplateStatus.PUBLISHED.value,
                        published_at=now,
                        updated_at=now,
                    )
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    find_template(session, slug)
                    logger.info("templates.publish.blocked", extra={"slug": slug})
                    raise ThumbnailRequiredError()
                template = self._load(session, find_template(session, slug))
        logger.info("templates.published", extra={"slug": slug})
        return template

    def unpublish(self, slug: str) -> Template:
        with handle_sqlalchemy_errors(entity="template"):
            with self._session_factory() as session, session.begin():
                row = find_template(session, slug)
                row.status = TemplateStatus.DRAFT.value
                row.published_at = None
                row.updated_at = utcnow()
                session.flush()
                template = self._load(session, row)
        logger.info("templates.unpublished", extra={"slug": slug})
        return template

    def delete(self, slug: str) -> None:
        """Remove the template together with its assets, tag links and versions."""
        with handle_sqlalchemy_errors(entity="template"):
            with self._session_factory() as session, session.begin():
                row = find_template(session, slug)
                template_id = row.id
                row.current_version_id = None
                session.flush()
                session.execute(
                    delete(TemplateAssetModel).where(
                        TemplateAssetModel.template_id == template_id
                    )
                )
                session.execute(
                    delete(TemplateTagModel).where(
                        TemplateTagModel.template_id == template_id
                    )
                )
                session.execute(
                    delete(TemplateVersionModel).where(
                        TemplateVersionModel.template_id == template_id
                    )
                )
                session.delete(row)
        logger.info("templates.deleted", extra={"slug": slug})

    def get_current_version(self, slug: str) -> TemplateVersion:
        """Return the version the image pipeline should run for ``slug``."""
        with self._session_factory() as session:
            row = find_template(session, slug)
            version = None
            if row.current_version_id:
                version = session.get(TemplateVersionModel, row.current_version_id)
            if version is None:
                raise NotFoundError(f"template '{slug}' has no active version")
            return TemplateVersion(
                id=version.id,
                template_id=version.template_id,
                version=version.version,
                prompt_template=version.prompt_template,
                negative_prompt=version.negative_prompt,
                model_provider=version.model_provider,
                model_name=version.model_name,
                model_parameters=dict(version.model_parameters or {}),
                output_mime=version.output_mime,
            )

    def increment_usage(self, slug: str) -> None:
        with handle_sqlalchemy_errors(entity="template"):
            with self._session_factory() as session, session.begin():
                session.execute(
                    update(TemplateModel)
                    .where(TemplateModel.slug == slug)
                    .values(usage_count=TemplateModel.usage_count + 1)
                    .execution_options(synchronize_session=False)
                )

    def upsert_seed(
        self,
        *,
        slug: str,
        name: str,
        prompt: str,
        status: str,
        visibility: str,
        model_provider: str,
        model_name: str,
    ) -> Template:
        """Create or refresh a template and its version 1 from seed data."""
        now = utcnow()
        with handle_sqlalchemy_errors(entity="template"):
            with self._session_factory() as session, session.begin():
                row = session.scalar(
                    select(TemplateModel).where(TemplateModel.slug == slug)
                )
                if row is None:
                    row = TemplateModel(slug=slug, created_at=now)
                    session.add(row)
                row.name = name
                row.status = status
                row.visibility = visibility
                row.published_at = now if status == TemplateStatus.PUBLISHED else None
                row.updated_at = now
                session.flush()

                version = session.scalar(
                    select(TemplateVersionModel).where(
                        TemplateVersionModel.template_id == row.id,
                        TemplateVersionModel.version == 1,
                    )
                )
                if version is None:
                    version = TemplateVersionModel(template_id=row.id, version=1)
                    session.add(version)
                version.prompt_template = prompt
                version.model_provider = model_provider
                version.model_name = model_name
                session.flush()

                row.current_version_id = version.id
                session.flush()
                return self._load(session, row)

    @staticmethod
    def _load(session: Session, row: TemplateModel) -> Template:
        tags = load_tags(session, [row.id])[row.id]
        return TemplateRepository._to_domain(
            row, thumbnail_url=_thumbnail_for(session, row.id), tags=tags
        )

    @staticmethod
    def _to_domain(
        row: TemplateModel, *, thumbnail_url: str | None, tags: list[str]
    ) -> Template:
        return Template(
            id=row.id,
            slug=row.slug,
            name=row.name,
            description=row.description,
            status=row.status,
            visibility=row.visibility,
            published_at=row.published_at,
            created_at=row.created_at,
            updated_at=row.updated_at,
            usage_count=row.usage_count or 0,
            thumbnail_url=thumbnail_url,
            tags=normalize_tags(tags),
        )


__all__ = ["TemplateRepository", "find_template", "upsert_thumbnail"]
