"""Download endpoint for derived renditions."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse

from .media_models import guess_media_type
from .media_store import MediaStore

router = APIRouter(tags=["download"])
logger = logging.getLogger(__name__)


def get_media_store(request: Request) -> MediaStore:
    """Fetch media store from application state."""
    try:
        return request.app.state.media_store  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - wiring error
        raise RuntimeError("MediaStore is not configured") from exc


@router.get("/download/{filename}")
def download(filename: str, store: MediaStore = Depends(get_media_store)) -> FileResponse:
    """Serve a derived file as an attachment."""
    path = store.resolve_derived(filename)
    logger.info("download.served", extra={"file_name": filename})
    return FileResponse(
        path=path,
        media_type=guess_media_type(path.name),
        filename=path.name,
    )
