"""HTTP route for image uploads."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Request, UploadFile
from pydantic import BaseModel

from .upload_service import UploadService

router = APIRouter(tags=["upload"])


class UploadResponse(BaseModel):
    filename: str


def get_upload_service(request: Request) -> UploadService:
    """Fetch upload service from application state."""
    try:
        return request.app.state.upload_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - wiring error
        raise RuntimeError("UploadService is not configured") from exc


@router.post("/upload", response_model=UploadResponse)
async def upload_image(
    image: UploadFile | None = File(None),
    file: UploadFile | None = File(None),
    service: UploadService = Depends(get_upload_service),
) -> UploadResponse:
    """Store a single image and return its generated identifier."""
    asset = await service.accept(image or file)
    return UploadResponse(filename=asset.identifier)
