"""Application configuration.

Every value that used to be a hard-coded constant (port, directories,
retention window, rate limits, encoder settings) is read from the environment
with the ``PIXELTUNE_`` prefix and handed to :func:`create_app` explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(slots=True)
class MediaPaths:
    incoming: Path
    derived: Path


def ensure_media_paths(paths: MediaPaths) -> None:
    paths.incoming.mkdir(parents=True, exist_ok=True)
    paths.derived.mkdir(parents=True, exist_ok=True)


class AppConfig(BaseSettings):
    """Pydantic settings container for the service."""

    model_config = SettingsConfigDict(env_prefix="PIXELTUNE_")

    host: str = Field(default="0.0.0.0", description="Interface uvicorn binds to.")
    port: int = Field(default=3000, ge=1, le=65535, description="Listening port.")
    upload_dir: Path = Field(
        default=Path("uploads"),
        description="Directory holding raw uploads keyed by generated identifier.",
    )
    processed_dir: Path = Field(
        default=Path("processed"),
        description="Directory holding preview and full-quality renditions.",
    )
    allowed_content_types: Tuple[str, ...] = Field(
        default=("image/png", "image/jpeg"),
        description="Content types accepted by the upload endpoint.",
    )
    max_upload_bytes: int = Field(
        default=20 * 1024 * 1024,
        ge=1,
        description="Upper bound on a single upload in bytes.",
    )
    chunk_size_bytes: int = Field(
        default=1 * 1024 * 1024,
        ge=1,
        description="Chunk size used when streaming uploads to disk.",
    )
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_window_seconds: int = Field(
        default=15 * 60,
        ge=1,
        description="Rolling window for the per-IP request cap.",
    )
    rate_limit_max_requests: int = Field(
        default=100,
        ge=1,
        description="Requests allowed per client IP within the window.",
    )
    retention_hours: float = Field(
        default=24,
        gt=0,
        description="Age after which derived files are swept.",
    )
    sweep_enabled: bool = Field(default=True)
    sweep_interval_seconds: float = Field(
        default=24 * 60 * 60,
        ge=1,
        description="Delay between retention sweeps.",
    )
    sweep_incoming: bool = Field(
        default=False,
        description="Also sweep raw uploads older than the retention window.",
    )
    preview_max_dimension: int = Field(default=800, ge=16)
    preview_quality: int = Field(default=60, ge=1, le=95)
    jpeg_quality: int = Field(default=90, ge=1, le=95)
    png_compress_level: int = Field(default=6, ge=0, le=9)
    cors_origins: Tuple[str, ...] = Field(default=("*",))
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=True, description="Render logs as JSON lines.")

    @property
    def media_paths(self) -> MediaPaths:
        return MediaPaths(incoming=self.upload_dir, derived=self.processed_dir)

    @classmethod
    def build_default(cls) -> "AppConfig":
        """Construct configuration from the environment."""

        return cls()


__all__ = ["AppConfig", "MediaPaths", "ensure_media_paths"]
