"""Persist uploaded images into the incoming store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from fastapi import UploadFile

from ..exceptions import MissingFileError, UnsupportedMediaError
from ..media.media_models import UploadedAsset
from ..media.media_store import MediaStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UploadService:
    """Accept a single image upload and assign it an opaque identifier."""

    store: MediaStore
    allowed_content_types: Sequence[str]
    max_upload_bytes: int
    chunk_size_bytes: int

    async def accept(self, upload: UploadFile | None) -> UploadedAsset:
        if upload is None or not upload.filename:
            logger.warning("upload.missing_file")
            raise MissingFileError()

        content_type = (upload.content_type or "").split(";")[0].strip().lower()
        if content_type not in self.allowed_content_types:
            logger.warning("upload.unsupported_media", extra={"content_type": content_type})
            raise UnsupportedMediaError(content_type)

        identifier = self.store.new_identifier()
        try:
            size = await self.store.persist_upload(
                identifier,
                upload,
                max_bytes=self.max_upload_bytes,
                chunk_size=self.chunk_size_bytes,
            )
        finally:
            await upload.close()

        logger.info(
            "upload.accepted",
            extra={
                "identifier": identifier,
                "original_name": upload.filename,
                "content_type": content_type,
                "size_bytes": size,
            },
        )
        return UploadedAsset(
            identifier=identifier,
            path=self.store.incoming_path(identifier),
            size_bytes=size,
            content_type=content_type,
        )
