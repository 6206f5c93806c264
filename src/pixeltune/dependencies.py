"""Dependency wiring helpers."""

from fastapi import FastAPI

from .config import AppConfig
from .media.download_api import router as download_router
from .media.media_store import MediaStore
from .processing.processing_api import router as processing_router
from .processing.processing_service import ProcessingService
from .processing.transform_engine import EncoderSettings
from .security.rate_limit import RateLimiter
from .upload.upload_api import router as upload_router
from .upload.upload_service import UploadService


def include_routers(app: FastAPI, config: AppConfig) -> None:
    """Mount module routers and attach services."""
    store = MediaStore(config.media_paths)
    store.ensure_structure()

    upload_service = UploadService(
        store=store,
        allowed_content_types=tuple(ct.lower() for ct in config.allowed_content_types),
        max_upload_bytes=config.max_upload_bytes,
        chunk_size_bytes=config.chunk_size_bytes,
    )
    processing_service = ProcessingService(
        store=store,
        encoder=EncoderSettings(
            preview_max_dimension=config.preview_max_dimension,
            preview_quality=config.preview_quality,
            jpeg_quality=config.jpeg_quality,
            png_compress_level=config.png_compress_level,
        ),
    )

    app.state.config = config
    app.state.media_store = store
    app.state.upload_service = upload_service
    app.state.processing_service = processing_service
    app.state.rate_limiter = (
        RateLimiter(
            max_requests=config.rate_limit_max_requests,
            window_seconds=config.rate_limit_window_seconds,
        )
        if config.rate_limit_enabled
        else None
    )

    app.include_router(upload_router)
    app.include_router(processing_router)
    app.include_router(download_router)
