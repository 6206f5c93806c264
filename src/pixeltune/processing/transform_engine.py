"""Pillow-backed transform engine.

The engine is a thin adapter: every pixel operation is a Pillow call. The
order is fixed: rotate, modulate (brightness then saturation), then an
optional linear contrast stretch around mid-grey.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass

from PIL import Image, ImageEnhance, UnidentifiedImageError

from ..exceptions import ProcessingFailureError
from ..media.media_models import RENDITIONS, DerivedRole

logger = logging.getLogger(__name__)

_EXACT_ROTATIONS = {
    90: Image.Transpose.ROTATE_270,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_90,
}


@dataclass(frozen=True, slots=True)
class TransformParams:
    rotation: float = 0.0
    brightness: float = 1.0
    contrast: float = 1.0
    saturation: float = 1.0


@dataclass(frozen=True, slots=True)
class EncoderSettings:
    preview_max_dimension: int = 800
    preview_quality: int = 60
    jpeg_quality: int = 90
    png_compress_level: int = 6


def decode(data: bytes) -> Image.Image:
    """Decode ``data`` into an RGB or RGBA working image."""

    try:
        with Image.open(io.BytesIO(data)) as source:
            source.load()
            if source.mode in ("RGBA", "LA", "PA") or "transparency" in source.info:
                return source.convert("RGBA")
            return source.convert("RGB")
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
        raise ProcessingFailureError(f"cannot decode image: {exc}") from exc


def rotate(image: Image.Image, degrees: float) -> Image.Image:
    """Rotate clockwise by ``degrees``, growing the canvas to fit."""

    normalised = degrees % 360
    if normalised == 0:
        return image
    exact = _EXACT_ROTATIONS.get(int(normalised)) if float(normalised).is_integer() else None
    if exact is not None:
        return image.transpose(exact)
    fill = (0, 0, 0, 0) if image.mode == "RGBA" else (0, 0, 0)
    return image.rotate(
        -normalised,
        resample=Image.Resampling.BICUBIC,
        expand=True,
        fillcolor=fill,
    )


def modulate(image: Image.Image, *, brightness: float, saturation: float) -> Image.Image:
    """Scale brightness and saturation in a single step."""

    result = image
    if brightness != 1:
        result = ImageEnhance.Brightness(result).enhance(brightness)
    if saturation != 1:
        result = ImageEnhance.Color(result).enhance(saturation)
    return result


def linear_contrast(image: Image.Image, factor: float) -> Image.Image:
    """Apply ``factor * v + (128 - 128 * factor)`` to the colour bands."""

    offset = 128 - 128 * factor
    table = [min(255, max(0, round(factor * value + offset))) for value in range(256)]
    bands = list(image.split())
    colour_bands = 3 if image.mode == "RGBA" else len(bands)
    for index in range(colour_bands):
        bands[index] = bands[index].point(table)
    return Image.merge(image.mode, bands)


def apply(image: Image.Image, params: TransformParams) -> Image.Image:
    result = rotate(image, params.rotation)
    result = modulate(result, brightness=params.brightness, saturation=params.saturation)
    if params.contrast != 1:
        result = linear_contrast(result, params.contrast)
    return result


def encode(image: Image.Image, role: DerivedRole, settings: EncoderSettings) -> bytes:
    """Encode ``image`` as the rendition described by ``role``."""

    spec = RENDITIONS[role]
    target = image
    if role is DerivedRole.PREVIEW:
        target = image.copy()
        limit = settings.preview_max_dimension
        target.thumbnail((limit, limit), Image.Resampling.LANCZOS)

    buffer = io.BytesIO()
    try:
        if spec.pil_format == "JPEG":
            quality = (
                settings.preview_quality
                if role is DerivedRole.PREVIEW
                else settings.jpeg_quality
            )
            target.convert("RGB").save(buffer, format="JPEG", quality=quality)
        else:
            target.save(buffer, format="PNG", compress_level=settings.png_compress_level)
    except (OSError, ValueError) as exc:
        raise ProcessingFailureError(f"cannot encode {role.value}: {exc}") from exc
    return buffer.getvalue()


def render(data: bytes, params: TransformParams) -> Image.Image:
    """Decode ``data`` once and apply ``params``."""

    image = decode(data)
    try:
        return apply(image, params)
    except (OSError, ValueError) as exc:
        raise ProcessingFailureError(f"cannot transform image: {exc}") from exc


__all__ = [
    "EncoderSettings",
    "TransformParams",
    "apply",
    "decode",
    "encode",
    "linear_contrast",
    "modulate",
    "render",
    "rotate",
]
