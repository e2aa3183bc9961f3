"""Image processing route."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from ..api.envelope import success_response
from ..auth.auth_dependencies import require_user
from .images_service import ImageProcessingService

router = APIRouter(
    prefix="/v1/images",
    tags=["images"],
    dependencies=[Depends(require_user)],
)


class ProcessImageRequest(BaseModel):
    template_id: str = ""
    image_path: str = ""


class ProcessImageResponse(BaseModel):
    processed_image_url: str


def get_image_service(request: Request) -> ImageProcessingService:
    try:
        return request.app.state.image_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("ImageProcessingService is not configured") from exc


@router.post("/process")
async def process_image(
    body: ProcessImageRequest,
    request: Request,
    service: ImageProcessingService = Depends(get_image_service),
):
    url = await service.process(body.template_id, body.image_path)
    return success_response(request, ProcessImageResponse(processed_image_url=url).model_dump())
