"""
Bitmap bridge - flat buffer exchange with bitmap collaborators.

Buffer formats:
- RGBA: width * height * 4 bytes, row-major, R G B A per pixel, 8 bits per
  channel, color samples premultiplied by alpha
- Gray: width * height bytes, row-major, no alpha

Premultiplying rounds half up, stored = round(c * a / 255); decoding inverts
it with c = round(255 * stored / a). Fully opaque images round-trip exactly.
Partially transparent ones lose precision, and a zero alpha always decodes
to TRANSPARENT.

A Pillow adapter (to_pil / from_pil / resize) stands in for the platform
bitmap APIs. Images entering from Pillow go through the premultiplied RGBA
path so they carry the same rounding as decode_rgba.
"""

import logging
from typing import Optional

import numpy as np
from PIL import Image as PILImage

from ..config import get_config
from ..const import GRAY_CHANNELS, MAX_CHANNEL_VALUE, RESAMPLE_METHODS, RGBA_CHANNELS
from ..core.image import Image
from ..core.pixel_types import PixelType
from ..errors import UnsupportedPixelTypeError

logger = logging.getLogger(__name__)

_RESAMPLING = {
    "nearest": PILImage.Resampling.NEAREST,
    "bilinear": PILImage.Resampling.BILINEAR,
    "bicubic": PILImage.Resampling.BICUBIC,
    "lanczos": PILImage.Resampling.LANCZOS,
}


# ===== Premultiplied alpha =====


def premultiply(channels: np.ndarray) -> np.ndarray:
    """
    Premultiply straight-alpha RGBA samples.

    Args:
        channels: (..., 4) uint8 array of straight RGBA

    Returns:
        (..., 4) uint8 array with color samples scaled by alpha / 255
    """
    wide = channels.astype(np.uint32)
    alpha = wide[..., 3:4]
    result = wide.copy()
    result[..., :3] = (wide[..., :3] * alpha + MAX_CHANNEL_VALUE // 2) // MAX_CHANNEL_VALUE
    return result.astype(np.uint8)


def unpremultiply(channels: np.ndarray) -> np.ndarray:
    """
    Undo premultiplication.

    Pixels with zero alpha become (0, 0, 0, 0). Color samples larger than
    their alpha (invalid premultiplied data) clamp to 255.
    """
    wide = channels.astype(np.uint32)
    alpha = wide[..., 3:4]
    safe_alpha = np.maximum(alpha, 1)
    color = (wide[..., :3] * MAX_CHANNEL_VALUE + safe_alpha // 2) // safe_alpha
    color = np.minimum(color, MAX_CHANNEL_VALUE)

    result = np.concatenate([color, alpha], axis=-1)
    result[(alpha == 0)[..., 0]] = 0
    return result.astype(np.uint8)


# ===== Flat buffers =====


def encode_rgba(image: Image) -> bytes:
    """Pack an RGBA image into a premultiplied row-major byte buffer."""
    if image.pixel_type is not PixelType.RGBA:
        raise UnsupportedPixelTypeError(f"encode_rgba needs an RGBA image, got {image.pixel_type!r}")
    return premultiply(image.to_array()).tobytes()


def decode_rgba(width: int, height: int, data: bytes) -> Optional[Image]:
    """
    Unpack a premultiplied RGBA buffer.

    Returns:
        RGBA image, or None for zero area or a buffer shorter than width * height * 4
    """
    expected = width * height * RGBA_CHANNELS
    if width <= 0 or height <= 0:
        logger.debug(f"Refusing to decode zero-area {width}x{height} RGBA buffer")
        return None
    if len(data) < expected:
        logger.debug(f"RGBA buffer too short: {len(data)} bytes, expected {expected}")
        return None

    channels = np.frombuffer(data, dtype=np.uint8, count=expected).reshape(height, width, RGBA_CHANNELS)
    return Image.from_array(unpremultiply(channels), PixelType.RGBA)


def encode_gray(image: Image) -> bytes:
    """Pack a GRAY image into a row-major byte buffer."""
    if image.pixel_type is not PixelType.GRAY:
        raise UnsupportedPixelTypeError(f"encode_gray needs a GRAY image, got {image.pixel_type!r}")
    return np.ascontiguousarray(image.to_array(), dtype=np.uint8).tobytes()


def decode_gray(width: int, height: int, data: bytes) -> Optional[Image]:
    """Unpack a gray buffer; None for zero area or a short buffer."""
    expected = width * height * GRAY_CHANNELS
    if width <= 0 or height <= 0:
        logger.debug(f"Refusing to decode zero-area {width}x{height} gray buffer")
        return None
    if len(data) < expected:
        logger.debug(f"Gray buffer too short: {len(data)} bytes, expected {expected}")
        return None

    samples = np.frombuffer(data, dtype=np.uint8, count=expected).reshape(height, width)
    return Image.from_array(samples, PixelType.GRAY)


# ===== Pillow adapter =====


def to_pil(image: Image) -> PILImage.Image:
    """Convert an RGBA image to Pillow 'RGBA' or a GRAY image to 'L'."""
    if image.pixel_type is PixelType.RGBA:
        return PILImage.fromarray(image.to_array())
    if image.pixel_type is PixelType.GRAY:
        return PILImage.fromarray(np.ascontiguousarray(image.to_array(), dtype=np.uint8))
    raise UnsupportedPixelTypeError(f"Only RGBA and GRAY images convert to Pillow, got {image.pixel_type!r}")


def from_pil(pil_image: PILImage.Image) -> Optional[Image]:
    """
    Convert a Pillow image.

    'L' images become GRAY; every other mode is converted to RGBA and passed
    through the premultiplied buffer path.
    """
    width, height = pil_image.size
    if pil_image.mode == "L":
        return decode_gray(width, height, pil_image.tobytes())

    straight = np.asarray(pil_image.convert("RGBA"), dtype=np.uint8)
    return decode_rgba(width, height, premultiply(straight).tobytes())


def resize(image: Image, width: int, height: int, resample: Optional[str] = None) -> Optional[Image]:
    """
    Resample an RGBA or GRAY image with Pillow.

    Args:
        image: Source image
        width: Target width
        height: Target height
        resample: One of RESAMPLE_METHODS; defaults to the configured method

    Returns:
        Resized image, or None when the target or source has zero area

    Raises:
        UnsupportedPixelTypeError: For pixel types other than RGBA and GRAY
        ValueError: For an unknown resample method
    """
    method = resample or get_config().resample
    if method not in RESAMPLE_METHODS:
        raise ValueError(f"Unknown resample method: {method}")

    if image.pixel_type not in (PixelType.RGBA, PixelType.GRAY):
        raise UnsupportedPixelTypeError(f"Only RGBA and GRAY images can be resized, got {image.pixel_type!r}")
    if width <= 0 or height <= 0 or image.width == 0 or image.height == 0:
        logger.debug(f"Skipping resize of {image.width}x{image.height} to {width}x{height}")
        return None

    resized = to_pil(image).resize((width, height), _RESAMPLING[method])
    return from_pil(resized)
