"""Public template listing for signed-in end users."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..api.envelope import success_response
from ..auth.auth_dependencies import require_user
from .templates_api import get_template_repo
from .templates_query import TemplateFilter, parse_page_param
from .templates_repository import TemplateRepository
from .templates_schemas import PublicTemplateListPayload, PublicTemplatePayload
from .templates_tags import split_tag_csv

router = APIRouter(
    prefix="/v1/templates",
    tags=["templates"],
    dependencies=[Depends(require_user)],
)


@router.get("")
def list_public_templates(
    request: Request,
    q: str | None = None,
    tags: str | None = None,
    sort: str | None = None,
    limit: str | None = None,
    offset: str | None = None,
    repo: TemplateRepository = Depends(get_template_repo),
):
    flt = TemplateFilter(
        q=q,
        tags=split_tag_csv(tags),
        sort=sort,
        limit=parse_page_param(limit),
        offset=parse_page_param(offset),
    )
    payload = PublicTemplateListPayload(
        templates=[PublicTemplatePayload.from_domain(item) for item in repo.list_public(flt)]
    )
    return success_response(request, payload.model_dump())
