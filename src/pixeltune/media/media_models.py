"""Data structures describing stored media."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from pathlib import Path


class DerivedRole(StrEnum):
    """Renditions produced for every process call."""

    PREVIEW = "preview"
    FULL_PNG = "full-png"
    FULL_JPEG = "full-jpeg"


@dataclass(frozen=True, slots=True)
class RenditionSpec:
    """Encoding and naming rules for one derived role."""

    suffix: str
    extension: str
    pil_format: str
    media_type: str


RENDITIONS: dict[DerivedRole, RenditionSpec] = {
    DerivedRole.PREVIEW: RenditionSpec("preview", "jpg", "JPEG", "image/jpeg"),
    DerivedRole.FULL_PNG: RenditionSpec("processed", "png", "PNG", "image/png"),
    DerivedRole.FULL_JPEG: RenditionSpec("processed", "jpg", "JPEG", "image/jpeg"),
}


def derived_filename(source_id: str, role: DerivedRole) -> str:
    """Return the derived identifier for ``source_id`` in ``role``.

    The mapping is pure, so reprocessing a source overwrites its renditions.
    """

    spec = RENDITIONS[role]
    return f"{source_id}_{spec.suffix}.{spec.extension}"


@dataclass(slots=True)
class UploadedAsset:
    identifier: str
    path: Path
    size_bytes: int
    content_type: str


@dataclass(slots=True)
class DerivedAsset:
    identifier: str
    role: DerivedRole
    path: Path
    media_type: str
    created_at: datetime


@dataclass(slots=True)
class StoredFile:
    """Entry yielded by age-based enumeration of a store directory."""

    name: str
    path: Path
    modified_at: datetime


def guess_media_type(name: str) -> str:
    lowered = Path(name).suffix.lower()
    if lowered in {".jpg", ".jpeg"}:
        return "image/jpeg"
    if lowered == ".png":
        return "image/png"
    return "application/octet-stream"
