"""Template asset repository backed by SQLAlchemy."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from ..db.db_models import TemplateAssetModel, TemplateModel, utcnow
from ..exceptions import NotFoundError, handle_sqlalchemy_errors
from ..templates.templates_repository import find_template
from .assets_models import AssetKind, TemplateAsset

logger = logging.getLogger(__name__)


def demote_thumbnails(session: Session, template_id: str, *, keep_id: str | None = None) -> int:
    """Turn every other thumbnail of the template into a preview."""
    stmt = update(TemplateAssetModel).where(
        TemplateAssetModel.template_id == template_id,
        TemplateAssetModel.kind == AssetKind.THUMBNAIL.value,
    )
    if keep_id is not None:
        stmt = stmt.where(TemplateAssetModel.id != keep_id)
    result = session.execute(
        stmt.values(kind=AssetKind.PREVIEW.value).execution_options(
            synchronize_session="fetch"
        )
    )
    return result.rowcount or 0


def next_sort_order(session: Session, template_id: str, kind: str) -> int:
    current = session.scalar(
        select(func.max(TemplateAssetModel.sort_order)).where(
            TemplateAssetModel.template_id == template_id,
            TemplateAssetModel.kind == kind,
        )
    )
    return 0 if current is None else current + 1


class AssetRepository:
    """Provide asset CRUD scoped to an owning template slug."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def template_exists(self, slug: str) -> bool:
        with self._session_factory() as session:
            return (
                session.scalar(select(TemplateModel.id).where(TemplateModel.slug == slug))
                is not None
            )

    def list_assets(self, slug: str) -> Sequence[TemplateAsset]:
        with self._session_factory() as session:
            template = find_template(session, slug)
            rows = session.scalars(
                select(TemplateAssetModel)
                .where(TemplateAssetModel.template_id == template.id)
                .order_by(
                    TemplateAssetModel.kind,
                    TemplateAssetModel.sort_order,
                    TemplateAssetModel.id,
                )
            ).all()
            return [self._to_domain(row) for row in rows]

    def create_asset(
        self,
        slug: str,
        *,
        kind: str,
        url: str,
        sort_order: int | None = None,
    ) -> TemplateAsset:
        with handle_sqlalchemy_errors(entity="template_asset"):
            with self._session_factory() as session, session.begin():
                template = find_template(session, slug)
                if kind == AssetKind.THUMBNAIL:
                    demoted = demote_thumbnails(session, template.id)
                    if demoted:
                        logger.info(
                            "assets.thumbnail.demoted",
                            extra={"slug": slug, "count": demoted},
                        )
                if sort_order is None:
                    sort_order = next_sort_order(session, template.id, kind)
                row = TemplateAssetModel(
                    template_id=template.id,
                    kind=kind,
                    url=url,
                    sort_order=sort_order,
                    created_at=utcnow(),
                )
                session.add(row)
                template.updated_at = utcnow()
                session.flush()
                asset = self._to_domain(row)
        logger.info(
            "assets.created", extra={"slug": slug, "asset_id": asset.id, "kind": kind}
        )
        return asset

    def update_asset(
        self,
        slug: str,
        asset_id: str,
        *,
        kind: str | None = None,
        sort_order: int | None = None,
    ) -> TemplateAsset:
        with handle_sqlalchemy_errors(entity="template_asset"):
            with self._session_factory() as session, session.begin():
                template = find_template(session, slug)
                row = self._find_asset(session, template.id, asset_id)
                if kind is None and sort_order is None:
                    return self._to_domain(row)
                if kind == AssetKind.THUMBNAIL:
                    demote_thumbnails(session, template.id, keep_id=row.id)
                if kind is not None:
                    row.kind = kind
                if sort_order is not None:
                    row.sort_order = sort_order
                template.updated_at = utcnow()
                session.flush()
                asset = self._to_domain(row)
        logger.info(
            "assets.updated",
            extra={"slug": slug, "asset_id": asset_id, "kind": asset.kind},
        )
        return asset

    def delete_asset(self, slug: str, asset_id: str) -> TemplateAsset:
        """Delete the row; stored bytes are left for the cleanup sweep."""
        with handle_sqlalchemy_errors(entity="template_asset"):
            with self._session_factory() as session, session.begin():
                template = find_template(session, slug)
                row = self._find_asset(session, template.id, asset_id)
                asset = self._to_domain(row)
                session.delete(row)
                template.updated_at = utcnow()
        logger.info("assets.deleted", extra={"slug": slug, "asset_id": asset_id})
        return asset

    def list_urls(self) -> set[str]:
        """Return every stored asset URL (used by the orphan sweep)."""
        with self._session_factory() as session:
            return set(session.scalars(select(TemplateAssetModel.url)))

    @staticmethod
    def _find_asset(session: Session, template_id: str, asset_id: str) -> TemplateAssetModel:
        row = session.scalar(
            select(TemplateAssetModel).where(
                TemplateAssetModel.id == asset_id,
                TemplateAssetModel.template_id == template_id,
            )
        )
        if row is None:
            raise NotFoundError(f"asset '{asset_id}' not found")
        return row

    @staticmethod
    def _to_domain(row: TemplateAssetModel) -> TemplateAsset:
        return TemplateAsset(
            id=row.id,
            template_id=row.template_id,
            kind=row.kind,
            url=row.url,
            sort_order=row.sort_order,
            created_at=row.created_at,
        )


__all__ = ["AssetRepository", "demote_thumbnails", "next_sort_order"]
