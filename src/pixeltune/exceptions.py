"""Domain level exceptions shared by the upload, process and download flows."""

from __future__ import annotations

from typing import Any, Sequence

__all__ = [
    "AppError",
    "MissingFileError",
    "UnsupportedMediaError",
    "PayloadTooLargeError",
    "InvalidParameterError",
    "InvalidIdentifierError",
    "SourceNotFoundError",
    "ProcessingFailureError",
    "AssetNotFoundError",
    "RateLimitedError",
]


class AppError(Exception):
    """Base class for application specific errors."""


class MissingFileError(AppError):
    """Raised when an upload request carries no file part."""


class UnsupportedMediaError(AppError):
    """Raised when the declared Content-Type is not allowed."""


class PayloadTooLargeError(AppError):
    """Raised when an upload exceeds the configured byte cap."""


class InvalidParameterError(AppError):
    """Raised when a transform request fails validation.

    ``errors`` holds every violation, not only the first one.
    """

    def __init__(self, errors: Sequence[dict[str, Any]]) -> None:
        super().__init__(f"{len(errors)} invalid parameter(s)")
        self.errors = list(errors)


class InvalidIdentifierError(AppError):
    """Raised for identifiers that could escape their storage directory."""


class SourceNotFoundError(AppError):
    """Raised when the uploaded source for a process call is missing."""


class ProcessingFailureError(AppError):
    """Raised when the transform engine cannot decode or encode an image."""


class AssetNotFoundError(AppError):
    """Raised when a derived file requested for download does not exist."""


class RateLimitedError(AppError):
    """Raised when a client exceeds its request allowance."""

    def __init__(self, retry_after: int) -> None:
        super().__init__(f"retry after {retry_after}s")
        self.retry_after = retry_after
