"""
Indexing strategies mapping logical (x, y) coordinates to flat buffer offsets.

Two variants exist:
- DirectIndexer: the image owns the whole buffer, offset = y * width + x
- OffsetIndexer: a cropped view into a larger raw buffer

Cropping always yields an OffsetIndexer whose offsets are combined additively
with the parent's, so addressing cost does not grow with crop depth. Neither
variant references the buffer itself, which keeps them shareable between
images.
"""

from dataclasses import dataclass
from typing import Union

import numpy as np


@dataclass(frozen=True)
class DirectIndexer:
    """Row-major addressing over a buffer of exactly width * height pixels."""

    width: int
    height: int

    def index(self, x: int, y: int) -> int:
        return y * self.width + x

    def offsets(self) -> np.ndarray:
        """Return the (height, width) grid of buffer offsets."""
        return np.arange(self.width * self.height, dtype=np.intp).reshape(self.height, self.width)

    def cropped(self, x_range: range, y_range: range) -> "OffsetIndexer":
        return OffsetIndexer(
            width=len(x_range),
            height=len(y_range),
            offset_x=x_range.start,
            offset_y=y_range.start,
            raw_width=self.width,
            raw_height=self.height,
        )


@dataclass(frozen=True)
class OffsetIndexer:
    """Addressing for a sub-region of a raw_width x raw_height buffer."""

    width: int
    height: int
    offset_x: int
    offset_y: int
    raw_width: int
    raw_height: int

    def index(self, x: int, y: int) -> int:
        return (y + self.offset_y) * self.raw_width + (x + self.offset_x)

    def offsets(self) -> np.ndarray:
        """Return the (height, width) grid of buffer offsets."""
        rows = np.arange(self.height, dtype=np.intp)[:, None] + self.offset_y
        cols = np.arange(self.width, dtype=np.intp)[None, :] + self.offset_x
        return rows * self.raw_width + cols

    def cropped(self, x_range: range, y_range: range) -> "OffsetIndexer":
        return OffsetIndexer(
            width=len(x_range),
            height=len(y_range),
            offset_x=self.offset_x + x_range.start,
            offset_y=self.offset_y + y_range.start,
            raw_width=self.raw_width,
            raw_height=self.raw_height,
        )


Indexer = Union[DirectIndexer, OffsetIndexer]
