"""
Numeric pixel algebra.

Each numeric PixelType maps to a PixelAlgebra describing its "summable"
representation: a zero, conversions to and from the pixel type, addition,
and scaling / division by integer weights. Multi-channel colors are summed
per channel through ChannelSum.

The table is closed: asking for the algebra of an untagged pixel type fails
immediately with UnsupportedPixelTypeError instead of coercing.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from ..const import MAX_CHANNEL_VALUE
from ..core.pixel_types import RGBA, PixelType
from ..errors import NonPositiveWeightSumError, UnsupportedPixelTypeError


def truncating_div(value: int, divisor: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(value) // abs(divisor)
    return quotient if (value >= 0) == (divisor > 0) else -quotient


def _clamp_channel(value: int) -> int:
    return min(max(int(value), 0), MAX_CHANNEL_VALUE)


@dataclass(frozen=True)
class ChannelSum:
    """Per-channel integer accumulator for RGBA pixels."""

    red: int = 0
    green: int = 0
    blue: int = 0
    alpha: int = 0

    def __add__(self, other: "ChannelSum") -> "ChannelSum":
        return ChannelSum(
            self.red + other.red,
            self.green + other.green,
            self.blue + other.blue,
            self.alpha + other.alpha,
        )

    def scaled(self, weight: int) -> "ChannelSum":
        return ChannelSum(self.red * weight, self.green * weight, self.blue * weight, self.alpha * weight)

    def divided(self, divisor: int) -> "ChannelSum":
        return ChannelSum(
            truncating_div(self.red, divisor),
            truncating_div(self.green, divisor),
            truncating_div(self.blue, divisor),
            truncating_div(self.alpha, divisor),
        )

    @classmethod
    def from_rgba(cls, pixel: RGBA) -> "ChannelSum":
        return cls(pixel.red, pixel.green, pixel.blue, pixel.alpha)

    def to_rgba(self) -> RGBA:
        return RGBA(
            _clamp_channel(self.red),
            _clamp_channel(self.green),
            _clamp_channel(self.blue),
            _clamp_channel(self.alpha),
        )


@dataclass(frozen=True)
class PixelAlgebra:
    """Summable representation of one pixel type."""

    zero: Any
    to_summable: Callable[[Any], Any]
    from_summable: Callable[[Any], Any]
    add: Callable[[Any, Any], Any]
    scale: Callable[[Any, int], Any]
    divide: Callable[[Any, int], Any]


def _add(a, b):
    return a + b


def _mul(a, weight: int):
    return a * weight


_GRAY = PixelAlgebra(
    zero=0,
    to_summable=int,
    from_summable=_clamp_channel,
    add=_add,
    scale=_mul,
    divide=truncating_div,
)

_INT = PixelAlgebra(
    zero=0,
    to_summable=int,
    from_summable=int,
    add=_add,
    scale=_mul,
    divide=truncating_div,
)

_REAL = PixelAlgebra(
    zero=0.0,
    to_summable=float,
    from_summable=float,
    add=_add,
    scale=_mul,
    divide=lambda value, divisor: value / divisor,
)

_RGBA = PixelAlgebra(
    zero=ChannelSum(),
    to_summable=ChannelSum.from_rgba,
    from_summable=ChannelSum.to_rgba,
    add=_add,
    scale=ChannelSum.scaled,
    divide=ChannelSum.divided,
)

ALGEBRAS: Dict[PixelType, PixelAlgebra] = {
    PixelType.GRAY: _GRAY,
    PixelType.INT: _INT,
    PixelType.FLOAT: _REAL,
    PixelType.DOUBLE: _REAL,
    PixelType.RGBA: _RGBA,
}


def algebra_for(pixel_type: Optional[PixelType]) -> PixelAlgebra:
    """
    Look up the algebra for a pixel type.

    Raises:
        UnsupportedPixelTypeError: If the type has no numeric algebra
    """
    algebra = ALGEBRAS.get(pixel_type) if pixel_type is not None else None
    if algebra is None:
        raise UnsupportedPixelTypeError(
            f"Pixel type {pixel_type!r} has no numeric algebra; tag the image with a PixelType"
        )
    return algebra


def weighted_mean(weighted_pixels: Iterable[Tuple[int, Any]], pixel_type: PixelType) -> Any:
    """
    Compute sum(weight * pixel) / sum(weight).

    Args:
        weighted_pixels: (weight, pixel) pairs
        pixel_type: Type of the pixels; selects the algebra

    Returns:
        Mean pixel of the same type. Integer types divide truncating toward
        zero; GRAY and RGBA channels are clamped to 0..255.

    Raises:
        NonPositiveWeightSumError: If the weights sum to zero or less
        UnsupportedPixelTypeError: If pixel_type has no algebra
    """
    algebra = algebra_for(pixel_type)

    total = algebra.zero
    weight_sum = 0
    for weight, pixel in weighted_pixels:
        total = algebra.add(total, algebra.scale(algebra.to_summable(pixel), weight))
        weight_sum += weight

    if weight_sum <= 0:
        raise NonPositiveWeightSumError(f"Weighted mean needs a positive weight sum, got {weight_sum}")

    return algebra.from_summable(algebra.divide(total, weight_sum))
