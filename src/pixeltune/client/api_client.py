"""Typed HTTP client facade for the PixelTune REST API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from httpx import AsyncClient, Response

from .editor_state import Adjustments


class ApiClientError(Exception):
    """Raised for non-2xx responses from the server."""

    def __init__(
        self,
        status_code: int,
        message: str,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.errors = errors or []


@dataclass(frozen=True, slots=True)
class ProcessedFiles:
    """Identifiers returned by ``POST /process``.

    Older servers answered with a single ``processedFilename``; in that case
    every field points at that one file.
    """

    preview: str
    png: str | None
    jpeg: str | None
    processed: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ProcessedFiles":
        if "previewFilename" in payload:
            jpeg = payload["jpegFilename"]
            return cls(
                preview=payload["previewFilename"],
                png=payload.get("pngFilename"),
                jpeg=jpeg,
                processed=payload.get("processedFilename", jpeg),
            )
        single = payload["processedFilename"]
        is_png = single.lower().endswith(".png")
        return cls(
            preview=single,
            png=single if is_png else None,
            jpeg=None if is_png else single,
            processed=single,
        )

    def for_format(self, fmt: Literal["jpeg", "png"]) -> str:
        chosen = self.png if fmt == "png" else self.jpeg
        return chosen or self.processed


@dataclass(slots=True)
class ApiClient:
    """Convenience wrapper around :class:`httpx.AsyncClient`."""

    http: AsyncClient

    async def upload(self, data: bytes, *, filename: str, content_type: str) -> str:
        """Upload an image and return its server-side identifier."""

        response = await self.http.post(
            "/upload", files={"image": (filename, data, content_type)}
        )
        return _json(response)["filename"]

    async def process(
        self,
        filename: str,
        adjustments: Adjustments,
        *,
        fmt: Literal["jpeg", "png"] | None = None,
    ) -> ProcessedFiles:
        body: dict[str, Any] = {"filename": filename, **adjustments.as_dict()}
        if fmt is not None:
            body["format"] = fmt
        response = await self.http.post("/process", json=body)
        return ProcessedFiles.from_payload(_json(response))

    async def download(self, filename: str) -> bytes:
        response = await self.http.get(f"/download/{filename}")
        _raise_for_status(response)
        return response.content


def _raise_for_status(response: Response) -> None:
    if response.is_success:
        return
    try:
        payload = response.json()
    except ValueError:
        raise ApiClientError(response.status_code, response.text or "request failed") from None
    if isinstance(payload, dict):
        errors = payload.get("errors")
        message = payload.get("error") or ("invalid parameters" if errors else "request failed")
        raise ApiClientError(response.status_code, str(message), errors)
    raise ApiClientError(response.status_code, "request failed")


def _json(response: Response) -> dict[str, Any]:
    _raise_for_status(response)
    return response.json()


__all__ = ["ApiClient", "ApiClientError", "ProcessedFiles"]
