"""Admin template routes (list, CRUD, publish/unpublish)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, status

from ..api.envelope import success_response
from ..auth.auth_dependencies import require_admin_user
from .templates_query import TemplateFilter, parse_page_param
from .templates_repository import TemplateRepository
from .templates_schemas import TemplateListPayload, TemplatePayload, TemplateWriteRequest
from .templates_tags import split_tag_csv
from .templates_validation import ensure_valid, validate_create, validate_update

router = APIRouter(
    prefix="/v1/admin/templates",
    tags=["admin-templates"],
    dependencies=[Depends(require_admin_user)],
)


def get_template_repo(request: Request) -> TemplateRepository:
    try:
        return request.app.state.template_repo  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("TemplateRepository is not configured") from exc


@router.get("")
def list_templates(
    request: Request,
    q: str | None = None,
    tags: str | None = None,
    status_filter: str | None = Query(default=None, alias="status"),
    visibility: str | None = None,
    sort: str | None = None,
    limit: str | None = None,
    offset: str | None = None,
    repo: TemplateRepository = Depends(get_template_repo),
):
    flt = TemplateFilter(
        q=q,
        tags=split_tag_csv(tags),
        status=status_filter or None,
        visibility=visibility or None,
        sort=sort,
        limit=parse_page_param(limit),
        offset=parse_page_param(offset),
    )
    templates = repo.list_admin(flt)
    payload = TemplateListPayload(
        templates=[TemplatePayload.from_domain(item) for item in templates]
    )
    return success_response(request, payload.model_dump())


@router.post("")
def create_template(
    body: TemplateWriteRequest,
    request: Request,
    repo: TemplateRepository = Depends(get_template_repo),
):
    payload = body.to_input()
    ensure_valid(validate_create(payload))
    template = repo.create(payload)
    return success_response(
        request,
        TemplatePayload.from_domain(template).model_dump(),
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/{slug}")
def fetch_template(
    slug: str,
    request: Request,
    repo: TemplateRepository = Depends(get_template_repo),
):
    template = repo.get(slug)
    return success_response(request, TemplatePayload.from_domain(template).model_dump())


@router.put("/{slug}")
def update_template(
    slug: str,
    body: TemplateWriteRequest,
    request: Request,
    repo: TemplateRepository = Depends(get_template_repo),
):
    payload = body.to_input()
    ensure_valid(validate_update(payload))
    template = repo.update(slug, payload)
    return success_response(request, TemplatePayload.from_domain(template).model_dump())


@router.delete("/{slug}")
def delete_template(
    slug: str,
    request: Request,
    repo: TemplateRepository = Depends(get_template_repo),
):
    repo.delete(slug)
    return success_response(request)


@router.post("/{slug}/publish")
def publish_template(
    slug: str,
    request: Request,
    repo: TemplateRepository = Depends(get_template_repo),
):
    template = repo.publish(slug)
    return success_response(request, TemplatePayload.from_domain(template).model_dump())


@router.post("/{slug}/unpublish")
def unpublish_template(
    slug: str,
    request: Request,
    repo: TemplateRepository = Depends(get_template_repo),
):
    template = repo.unpublish(slug)
    return success_response(request, TemplatePayload.from_domain(template).model_dump())
