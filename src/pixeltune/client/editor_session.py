"""Drive the editor state machine against the HTTP API."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import Literal

from PIL import Image

from .api_client import ApiClient, ApiClientError
from .editor_state import (
    AdjustmentsChanged,
    CropBox,
    CropConfirmed,
    EditorPhase,
    EditorState,
    FileRequested,
    FileSelected,
    ProcessSucceeded,
    RequestFailed,
    Reset,
    SelectedFile,
    UploadSucceeded,
    transition,
)

logger = logging.getLogger(__name__)

_PIL_FORMATS = {"image/png": "PNG", "image/jpeg": "JPEG"}


def crop_image(file: SelectedFile, box: CropBox) -> SelectedFile:
    """Crop ``file`` locally, keeping its encoding."""
    pil_format = _PIL_FORMATS.get(file.content_type, "PNG")
    with Image.open(io.BytesIO(file.data)) as source:
        cropped = source.crop(box)
        if pil_format == "JPEG" and cropped.mode not in ("RGB", "L"):
            cropped = cropped.convert("RGB")
        buffer = io.BytesIO()
        cropped.save(buffer, format=pil_format)
    return SelectedFile(data=buffer.getvalue(), filename=file.filename, content_type=file.content_type)


@dataclass
class EditorSession:
    """Single-user editing session; holds the only reference to its state."""

    api: ApiClient
    state: EditorState = field(default_factory=EditorState)

    def _apply(self, event: object) -> EditorState:
        self.state = transition(self.state, event)  # type: ignore[arg-type]
        return self.state

    async def open(
        self,
        data: bytes,
        *,
        filename: str,
        content_type: str,
        crop_box: CropBox | None = None,
    ) -> EditorState:
        """Select, optionally crop, upload and render a new image."""
        if self.state.phase is not EditorPhase.AWAITING_FILE:
            self._apply(Reset())
            self._apply(FileRequested())
        self._apply(FileSelected(SelectedFile(data, filename, content_type)))
        self._apply(CropConfirmed(crop_box))

        selected = self.state.source
        if selected is None:
            raise RuntimeError("no file selected")
        if crop_box is not None:
            selected = crop_image(selected, crop_box)
        try:
            identifier = await self.api.upload(
                selected.data, filename=selected.filename, content_type=selected.content_type
            )
        except ApiClientError as exc:
            logger.warning("client.upload_failed", extra={"status_code": exc.status_code})
            return self._apply(RequestFailed("Failed to upload image. Please try again."))
        self._apply(UploadSucceeded(identifier))
        return await self._render()

    async def adjust(self, **changes: float) -> EditorState:
        """Change one or more sliders and re-render when an image is loaded."""
        adjustments = self.state.adjustments
        for name, value in changes.items():
            adjustments = adjustments.with_value(name, value)
        self._apply(AdjustmentsChanged(adjustments))
        if self.state.phase is EditorPhase.PROCESSING:
            return await self._render()
        return self.state

    async def reset_adjustments(self) -> EditorState:
        self._apply(AdjustmentsChanged(self.state.adjustments.reset()))
        if self.state.phase is EditorPhase.PROCESSING:
            return await self._render()
        return self.state

    async def download(self, fmt: Literal["jpeg", "png"] = "jpeg") -> bytes:
        """Fetch the full-quality rendition in ``fmt``."""
        result = self.state.result
        if self.state.phase is not EditorPhase.READY or result is None:
            raise RuntimeError("no processed image available")
        return await self.api.download(result.for_format(fmt))

    def clear(self) -> EditorState:
        return self._apply(Reset())

    async def _render(self) -> EditorState:
        revision = self.state.revision
        filename = self.state.source_filename
        if filename is None:
            raise RuntimeError("no uploaded image to process")
        try:
            files = await self.api.process(filename, self.state.adjustments)
        except ApiClientError as exc:
            logger.warning("client.process_failed", extra={"status_code": exc.status_code})
            return self._apply(
                RequestFailed("Failed to process image. Please try again.", revision)
            )
        return self._apply(ProcessSucceeded(files, revision))


__all__ = ["EditorSession", "crop_image"]
