"""
Core pixel container, indexing strategies, storage and views.
"""

from .image import Image
from .indexing import DirectIndexer, OffsetIndexer
from .pixel_types import BLACK, RGBA, TRANSPARENT, WHITE, PixelType
from .views import Column, Row, RowRange

__all__ = [
    "Image",
    "DirectIndexer",
    "OffsetIndexer",
    "PixelType",
    "RGBA",
    "TRANSPARENT",
    "BLACK",
    "WHITE",
    "Row",
    "Column",
    "RowRange",
]
