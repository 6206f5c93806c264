"""HTTP route for image processing."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request

from ..exceptions import InvalidParameterError
from ..media.media_models import DerivedRole
from .processing_schemas import ProcessResponse, parse_transform_request
from .processing_service import ProcessingService

router = APIRouter(tags=["process"])
logger = logging.getLogger(__name__)


def get_processing_service(request: Request) -> ProcessingService:
    """Fetch processing service from application state."""
    try:
        return request.app.state.processing_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - wiring error
        raise RuntimeError("ProcessingService is not configured") from exc


@router.post("/process", response_model=ProcessResponse)
async def process_image(
    request: Request,
    service: ProcessingService = Depends(get_processing_service),
) -> ProcessResponse:
    """Validate transform parameters, render all outputs, return their names."""
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.warning("process.invalid_json")
        raise InvalidParameterError(
            [{"field": "body", "message": "Request body must be valid JSON"}]
        ) from exc

    transform = parse_transform_request(payload)
    result = await service.process(transform)
    return ProcessResponse(
        previewFilename=result.filename(DerivedRole.PREVIEW),
        pngFilename=result.filename(DerivedRole.FULL_PNG),
        jpegFilename=result.filename(DerivedRole.FULL_JPEG),
        processedFilename=result.processed_filename,
    )
