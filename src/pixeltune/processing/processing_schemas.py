"""Pydantic schemas for the process endpoint."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..exceptions import InvalidParameterError


class OutputFormat(StrEnum):
    JPEG = "jpeg"
    PNG = "png"


class TransformRequest(BaseModel):
    """Transform parameters submitted by the client."""

    model_config = ConfigDict(frozen=True)

    filename: str = Field(min_length=1)
    rotation: float = Field(default=0, ge=0, le=360)
    brightness: float = Field(default=1, ge=0, le=2)
    contrast: float = Field(default=1, ge=0, le=2)
    saturation: float = Field(default=1, ge=0, le=2)
    format: OutputFormat | None = None

    @field_validator("format", mode="before")
    @classmethod
    def _normalise_format(cls, value: Any) -> Any:
        if isinstance(value, str):
            lowered = value.strip().lower()
            return "jpeg" if lowered == "jpg" else lowered
        return value


class ProcessResponse(BaseModel):
    previewFilename: str
    pngFilename: str
    jpegFilename: str
    processedFilename: str


def _describe(error: dict[str, Any]) -> dict[str, Any]:
    field = ".".join(str(part) for part in error.get("loc", ())) or "body"
    return {"field": field, "message": error.get("msg", "invalid value")}


def parse_transform_request(payload: Any) -> TransformRequest:
    """Validate ``payload`` and report every violation at once."""

    if not isinstance(payload, dict):
        raise InvalidParameterError(
            [{"field": "body", "message": "Request body must be a JSON object"}]
        )
    try:
        return TransformRequest.model_validate(payload)
    except ValidationError as exc:
        raise InvalidParameterError([_describe(error) for error in exc.errors()]) from exc


__all__ = [
    "OutputFormat",
    "ProcessResponse",
    "TransformRequest",
    "parse_transform_request",
]
