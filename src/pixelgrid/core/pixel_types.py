"""
Pixel element types.

PixelType is the closed set of element types the numeric engines know about.
Images may also hold untagged elements (pixel_type=None) of any comparable
type; those support storage, views, transforms and geometry but not
weighted combination.
"""

import numbers
from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence, Tuple

import numpy as np

from ..const import MAX_CHANNEL_VALUE


@dataclass(frozen=True)
class RGBA:
    """8-bit straight-alpha color."""

    red: int
    green: int
    blue: int
    alpha: int = MAX_CHANNEL_VALUE

    def __post_init__(self):
        for name, value in self._channels():
            if not 0 <= value <= MAX_CHANNEL_VALUE:
                raise ValueError(f"RGBA {name} must be in [0, {MAX_CHANNEL_VALUE}], got {value}")

    def _channels(self) -> Tuple[Tuple[str, int], ...]:
        return (("red", self.red), ("green", self.green), ("blue", self.blue), ("alpha", self.alpha))

    @classmethod
    def from_gray(cls, gray: int, alpha: int = MAX_CHANNEL_VALUE) -> "RGBA":
        return cls(gray, gray, gray, alpha)

    @property
    def gray(self) -> int:
        """Integer average of the color channels."""
        return (self.red + self.green + self.blue) // 3

    @property
    def red_float(self) -> float:
        return self.red / MAX_CHANNEL_VALUE

    @property
    def green_float(self) -> float:
        return self.green / MAX_CHANNEL_VALUE

    @property
    def blue_float(self) -> float:
        return self.blue / MAX_CHANNEL_VALUE

    @property
    def alpha_float(self) -> float:
        return self.alpha / MAX_CHANNEL_VALUE

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (self.red, self.green, self.blue, self.alpha)


TRANSPARENT = RGBA(0, 0, 0, 0)
BLACK = RGBA(0, 0, 0)
WHITE = RGBA(MAX_CHANNEL_VALUE, MAX_CHANNEL_VALUE, MAX_CHANNEL_VALUE)


class PixelType(Enum):
    """Supported pixel element types and their storage dtypes."""

    GRAY = "gray"
    INT = "int"
    FLOAT = "float"
    DOUBLE = "double"
    RGBA = "rgba"

    @property
    def dtype(self) -> np.dtype:
        return _DTYPES[self]

    def to_array(self, values: Sequence[Any]) -> np.ndarray:
        """Convert a flat sequence of pixels to a 1-D storage array."""
        return pixels_to_array(values, self)


_DTYPES = {
    PixelType.GRAY: np.dtype(np.uint8),
    PixelType.INT: np.dtype(np.int64),
    PixelType.FLOAT: np.dtype(np.float32),
    PixelType.DOUBLE: np.dtype(np.float64),
    PixelType.RGBA: np.dtype(object),
}


# Inclusive value bounds for integer-backed pixel types
_INTEGER_BOUNDS = {
    PixelType.GRAY: (0, MAX_CHANNEL_VALUE),
    PixelType.INT: (int(np.iinfo(np.int64).min), int(np.iinfo(np.int64).max)),
}


def storage_dtype(pixel_type) -> np.dtype:
    """Storage dtype for a pixel type; untagged pixels are stored as objects."""
    if pixel_type is None:
        return np.dtype(object)
    return pixel_type.dtype


def pixels_to_array(values: Sequence[Any], pixel_type) -> np.ndarray:
    """
    Copy a flat pixel sequence into a new 1-D storage array.

    Args:
        values: Flat row-major pixels (list, tuple, iterable or 1-D ndarray)
        pixel_type: PixelType tag or None for untagged objects

    Returns:
        Array owned by the caller (never aliases ``values``)

    Raises:
        ValueError: If GRAY or INT values are not integers or fall outside their range
    """
    dtype = storage_dtype(pixel_type)
    if not isinstance(values, np.ndarray):
        values = list(values)

    if dtype == np.dtype(object):
        array = np.empty(len(values), dtype=object)
        # Element-wise so tuple pixels are not broadcast into a second axis
        for i, value in enumerate(values):
            array[i] = value
        return array

    if pixel_type in _INTEGER_BOUNDS:
        return _integer_array(values, pixel_type)

    return np.array(values, dtype=dtype).ravel()


def _integer_array(values: Sequence[Any], pixel_type: PixelType) -> np.ndarray:
    """Build GRAY / INT storage, rejecting non-integers and out-of-range values."""
    raw = np.asarray(values).ravel()
    if raw.size == 0:
        return np.empty(0, dtype=pixel_type.dtype)

    if raw.dtype.kind == "O":
        for value in raw.tolist():
            check_pixel(value, pixel_type)
        return np.array(raw.tolist(), dtype=pixel_type.dtype)

    if raw.dtype.kind not in "biu":
        raise ValueError(f"{pixel_type.name.capitalize()} pixels must be integers, got {raw.dtype} values")

    low, high = _INTEGER_BOUNDS[pixel_type]
    if int(raw.min()) < low or int(raw.max()) > high:
        raise ValueError(f"{pixel_type.name.capitalize()} pixels must be in [{low}, {high}]")
    return raw.astype(pixel_type.dtype)


def check_pixel(value: Any, pixel_type) -> None:
    """
    Validate a single pixel before it is written into storage.

    GRAY and INT pixels must be integers within their storage range; storing
    them never truncates or wraps. FLOAT pixels are accepted as-is and are
    rounded to the nearest float32 on write.

    Raises:
        ValueError: If the value cannot be stored exactly for an integer type
    """
    bounds = _INTEGER_BOUNDS.get(pixel_type)
    if bounds is None:
        return

    label = pixel_type.name.capitalize()
    if not isinstance(value, numbers.Integral):
        raise ValueError(f"{label} pixels must be integers, got {value!r}")
    low, high = bounds
    if not low <= value <= high:
        raise ValueError(f"{label} pixels must be in [{low}, {high}], got {value}")
