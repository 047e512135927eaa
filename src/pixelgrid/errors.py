"""
Exception types raised by pixelgrid.

Bounds violations never raise: they surface as ``None`` results or silent
no-ops. The classes here cover caller mistakes that cannot be expressed that
way.
"""


class PixelGridError(Exception):
    """Base class for pixelgrid errors."""


class PixelCountError(PixelGridError, ValueError):
    """Raised when a pixel buffer is shorter than width * height."""

    def __init__(self, width: int, height: int, count: int):
        self.width = width
        self.height = height
        self.count = count
        super().__init__(f"Expected at least {width * height} pixels for {width}x{height}, got {count}")


class UnsupportedPixelTypeError(PixelGridError, TypeError):
    """Raised when a numeric operation is requested for a pixel type without an algebra."""


class NonPositiveWeightSumError(AssertionError):
    """
    Weighted mean precondition failure.

    A weight sum <= 0 has no defined mean. This is a programming error in the
    kernel or weight construction, so it derives from AssertionError rather
    than PixelGridError.
    """
