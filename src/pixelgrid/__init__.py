"""
pixelgrid - generic in-memory 2D pixel grids.

Stores, indexes, crops, transforms and numerically combines pixel data for
grayscale, integer, floating point and RGBA element types, independent of
any image file format.
"""

from .core import BLACK, RGBA, TRANSPARENT, WHITE, Column, DirectIndexer, Image, OffsetIndexer, PixelType, Row, RowRange
from .errors import NonPositiveWeightSumError, PixelCountError, PixelGridError, UnsupportedPixelTypeError
from .processing.convolution import box_kernel, convolve, mean_filter
from .processing.pixel_algebra import weighted_mean

__version__ = "0.1.0"

__all__ = [
    "Image",
    "PixelType",
    "RGBA",
    "TRANSPARENT",
    "BLACK",
    "WHITE",
    "Row",
    "Column",
    "RowRange",
    "DirectIndexer",
    "OffsetIndexer",
    "convolve",
    "mean_filter",
    "box_kernel",
    "weighted_mean",
    "PixelGridError",
    "PixelCountError",
    "UnsupportedPixelTypeError",
    "NonPositiveWeightSumError",
]
