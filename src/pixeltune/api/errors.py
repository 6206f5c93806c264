"""Translate domain errors into HTTP responses."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..exceptions import (
    AppError,
    AssetNotFoundError,
    InvalidIdentifierError,
    InvalidParameterError,
    MissingFileError,
    PayloadTooLargeError,
    ProcessingFailureError,
    RateLimitedError,
    SourceNotFoundError,
    UnsupportedMediaError,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ApiError(Exception):
    """Structured application-level error for HTTP handlers."""

    status_code: int
    message: str
    errors: list[dict[str, Any]] | None = None
    headers: Mapping[str, str] | None = None

    def to_response(self) -> JSONResponse:
        """Materialise the error into a ``JSONResponse`` instance."""

        if self.errors is not None:
            content: dict[str, Any] = {"errors": self.errors}
        else:
            content = {"error": self.message}
        return JSONResponse(
            status_code=self.status_code,
            content=content,
            headers=dict(self.headers or {}),
        )


def to_api_error(exc: AppError) -> ApiError:
    """Map a domain error to its user-safe HTTP representation."""

    if isinstance(exc, InvalidParameterError):
        return ApiError(status.HTTP_400_BAD_REQUEST, "Invalid parameters", errors=exc.errors)
    if isinstance(exc, MissingFileError):
        return ApiError(status.HTTP_400_BAD_REQUEST, "No file uploaded.")
    if isinstance(exc, InvalidIdentifierError):
        return ApiError(status.HTTP_400_BAD_REQUEST, "Invalid filename")
    if isinstance(exc, UnsupportedMediaError):
        return ApiError(
            status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, "Only PNG and JPEG images are accepted"
        )
    if isinstance(exc, PayloadTooLargeError):
        return ApiError(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, "File too large")
    if isinstance(exc, SourceNotFoundError):
        return ApiError(status.HTTP_404_NOT_FOUND, "Source image not found")
    if isinstance(exc, AssetNotFoundError):
        return ApiError(status.HTTP_404_NOT_FOUND, "File not found")
    if isinstance(exc, ProcessingFailureError):
        return ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Error processing image")
    if isinstance(exc, RateLimitedError):
        return ApiError(
            status.HTTP_429_TOO_MANY_REQUESTS,
            "Too many requests, please try again later.",
            headers={"Retry-After": str(exc.retry_after)},
        )
    return ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render :class:`AppError` subclasses as JSON payloads."""

    api_error = to_api_error(exc)
    if api_error.status_code >= 500:
        logger.error(
            "api.request_failed",
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )
    return api_error.to_response()


_UPLOAD_FIELDS = frozenset({"image", "file"})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Keep framework validation failures inside the application error shape.

    A non-file value in an upload field counts as no file at all.
    """

    details = exc.errors()
    if any(_is_upload_field(detail.get("loc", ())) for detail in details):
        return await app_error_handler(request, MissingFileError())
    errors = [
        {
            "field": ".".join(str(part) for part in detail.get("loc", ())[1:]) or "body",
            "message": detail.get("msg", "invalid value"),
        }
        for detail in details
    ]
    return await app_error_handler(request, InvalidParameterError(errors))


def _is_upload_field(loc: Any) -> bool:
    return len(loc) >= 2 and loc[0] == "body" and loc[1] in _UPLOAD_FIELDS


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Hide unexpected failures behind a generic 500."""

    logger.exception("api.unhandled_error", extra={"path": request.url.path}, exc_info=exc)
    return ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error").to_response()


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)


__all__ = [
    "ApiError",
    "app_error_handler",
    "register_error_handlers",
    "to_api_error",
    "unhandled_error_handler",
    "validation_error_handler",
]
