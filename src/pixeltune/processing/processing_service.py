"""Orchestrate transform and persistence of derived renditions."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from PIL import Image

from ..exceptions import ProcessingFailureError
from ..media.media_models import RENDITIONS, DerivedAsset, DerivedRole, derived_filename
from ..media.media_store import MediaStore, validate_identifier
from . import transform_engine
from .processing_schemas import OutputFormat, TransformRequest

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ProcessResult:
    source_id: str
    assets: dict[DerivedRole, DerivedAsset]
    requested_format: OutputFormat

    def filename(self, role: DerivedRole) -> str:
        return self.assets[role].identifier

    @property
    def processed_filename(self) -> str:
        role = (
            DerivedRole.FULL_PNG
            if self.requested_format is OutputFormat.PNG
            else DerivedRole.FULL_JPEG
        )
        return self.filename(role)


@dataclass(slots=True)
class ProcessingService:
    """Render preview, PNG and JPEG outputs for an uploaded source."""

    store: MediaStore
    encoder: transform_engine.EncoderSettings

    async def process(self, request: TransformRequest) -> ProcessResult:
        source_id = validate_identifier(request.filename)
        data = await asyncio.to_thread(self.store.read_incoming, source_id)

        params = transform_engine.TransformParams(
            rotation=request.rotation,
            brightness=request.brightness,
            contrast=request.contrast,
            saturation=request.saturation,
        )
        names = {role: derived_filename(source_id, role) for role in DerivedRole}
        try:
            image = await asyncio.to_thread(transform_engine.render, data, params)
            encoded = await self._encode_all(image)
            paths = await asyncio.to_thread(
                self.store.commit_derived,
                {names[role]: payload for role, payload in encoded.items()},
            )
        except (OSError, ProcessingFailureError) as exc:
            logger.exception(
                "process.failed",
                extra={"source_id": source_id, "params": _describe(params)},
            )
            if isinstance(exc, OSError):
                raise ProcessingFailureError(f"could not store outputs: {exc}") from exc
            raise

        created_at = datetime.now(timezone.utc)
        assets = {
            role: DerivedAsset(
                identifier=names[role],
                role=role,
                path=paths[names[role]],
                media_type=RENDITIONS[role].media_type,
                created_at=created_at,
            )
            for role in encoded
        }

        logger.info(
            "process.completed",
            extra={
                "source_id": source_id,
                "params": _describe(params),
                "outputs": [asset.identifier for asset in assets.values()],
            },
        )
        return ProcessResult(
            source_id=source_id,
            assets=assets,
            requested_format=request.format or OutputFormat.JPEG,
        )

    async def _encode_all(self, image: Image.Image) -> dict[DerivedRole, bytes]:
        """Encode every rendition concurrently; all must succeed."""

        roles = list(DerivedRole)
        payloads = await asyncio.gather(
            *(
                asyncio.to_thread(transform_engine.encode, image, role, self.encoder)
                for role in roles
            )
        )
        return dict(zip(roles, payloads))


def _describe(params: transform_engine.TransformParams) -> dict[str, float]:
    return {
        "rotation": params.rotation,
        "brightness": params.brightness,
        "contrast": params.contrast,
        "saturation": params.saturation,
    }


__all__ = ["ProcessResult", "ProcessingService"]
