"""Admin template asset routes (list, upload, update, delete)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status

from ..api.envelope import success_response
from ..auth.auth_dependencies import require_admin_user
from .assets_repository import AssetRepository
from .assets_schemas import AssetListPayload, AssetPayload, AssetUpdateRequest
from .assets_service import AssetService, ensure_kind

router = APIRouter(
    prefix="/v1/admin/templates/{slug}/assets",
    tags=["admin-assets"],
    dependencies=[Depends(require_admin_user)],
)


def get_asset_repo(request: Request) -> AssetRepository:
    try:
        return request.app.state.asset_repo  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("AssetRepository is not configured") from exc


def get_asset_service(request: Request) -> AssetService:
    try:
        return request.app.state.asset_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("AssetService is not configured") from exc


@router.get("")
def list_assets(
    slug: str,
    request: Request,
    repo: AssetRepository = Depends(get_asset_repo),
):
    assets = repo.list_assets(slug)
    payload = AssetListPayload(assets=[AssetPayload.from_domain(item) for item in assets])
    return success_response(request, payload.model_dump())


@router.post("")
async def upload_asset(
    slug: str,
    request: Request,
    kind: str = Form(""),
    file: UploadFile = File(...),
    sort_order: int | None = Form(None),
    service: AssetService = Depends(get_asset_service),
):
    asset = await service.upload(slug, kind=kind, upload=file, sort_order=sort_order)
    return success_response(
        request,
        AssetPayload.from_domain(asset).model_dump(),
        status_code=status.HTTP_201_CREATED,
    )


@router.put("/{asset_id}")
def update_asset(
    slug: str,
    asset_id: str,
    body: AssetUpdateRequest,
    request: Request,
    repo: AssetRepository = Depends(get_asset_repo),
):
    kind = ensure_kind(body.kind) if body.kind is not None else None
    asset = repo.update_asset(slug, asset_id, kind=kind, sort_order=body.sort_order)
    return success_response(request, AssetPayload.from_domain(asset).model_dump())


@router.delete("/{asset_id}")
def delete_asset(
    slug: str,
    asset_id: str,
    request: Request,
    repo: AssetRepository = Depends(get_asset_repo),
):
    repo.delete_asset(slug, asset_id)
    return success_response(request)
