"""
Image - generic 2D pixel container.

An Image owns a flat row-major pixel buffer (shared copy-on-write) and an
indexing strategy. Cropping is O(1) and shares the buffer through a composed
OffsetIndexer; every other derived image (map, flip, rotate, convolve)
materializes new storage.

Bounds violations are never errors: reads return None, writes are no-ops and
invalid crops return None.
"""

import functools
import logging
from typing import Any, Callable, Generic, Iterator, List, Optional, Sequence, Tuple, TypeVar, Union

import numpy as np

from ..const import RGBA_CHANNELS
from ..errors import PixelCountError
from ..processing import geometry
from .indexing import DirectIndexer, Indexer
from .pixel_buffer import BufferHandle, PixelBuffer
from .pixel_types import RGBA, PixelType, check_pixel, pixels_to_array, storage_dtype
from .views import Column, Row, RowRange

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")

RangeLike = Union[range, slice]


def to_range(key: RangeLike, extent: int) -> range:
    """
    Convert a slice or range into a step-1 range.

    Slice bounds are taken literally (no clamping or negative wrap-around) so
    out-of-bounds requests stay detectable. Missing bounds default to 0 and
    ``extent``.
    """
    if isinstance(key, range):
        result = key
    elif isinstance(key, slice):
        start = 0 if key.start is None else key.start
        stop = extent if key.stop is None else key.stop
        result = range(start, stop, 1 if key.step is None else key.step)
    else:
        raise TypeError(f"Expected range or slice, got {type(key).__name__}")

    if result.step != 1:
        raise ValueError(f"Pixel ranges must have step 1, got {result.step}")
    return result


def _is_index(value: Any) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def _valid_range(r: range, extent: int) -> bool:
    # Start and inclusive end must both address existing pixels
    return r.stop >= r.start and 0 <= r.start < extent and 0 <= r.stop - 1 < extent


def _flat_storage(
    width: int, height: int, pixels: Sequence[Any], pixel_type
) -> Tuple[int, int, int, Optional[np.ndarray]]:
    """Clamp dimensions and build storage; storage is None on a pixel shortfall."""
    width = max(int(width), 0)
    height = max(int(height), 0)
    count = width * height

    if isinstance(pixels, np.ndarray):
        pixels = pixels.ravel()
    else:
        pixels = list(pixels)
    if len(pixels) < count:
        return width, height, len(pixels), None
    return width, height, len(pixels), pixels_to_array(pixels[:count], pixel_type)


class PixelIterator:
    """
    Row-major cursor over an image's pixels.

    Holds (x, y, offset) state. Each call to ``iter(image)`` creates a fresh
    cursor; an exhausted cursor stays exhausted. A live cursor is a holder
    of the image storage, so writes to the image during iteration go to a
    private copy and the cursor keeps yielding the pixels it started with.
    """

    def __init__(self, image: "Image"):
        self._handle = BufferHandle(self, image._handle.buffer)
        self._buffer = self._handle.buffer
        self._indexer = image._indexer
        self._width = image.width
        self._height = image.height
        self._x = 0
        self._y = 0
        self._offset = self._indexer.index(0, 0)

    def __iter__(self) -> "PixelIterator":
        return self

    def _advance(self) -> Optional[Tuple[int, int, Any]]:
        if self._width > 0 and self._x >= self._width:
            self._x = 0
            self._y += 1
            self._offset = self._indexer.index(0, self._y)
        if self._width == 0 or self._y >= self._height:
            self._handle.release()
            return None

        item = (self._x, self._y, self._buffer.read(self._offset))
        self._x += 1
        self._offset += 1
        return item

    def __next__(self) -> Any:
        item = self._advance()
        if item is None:
            raise StopIteration
        return item[2]


class CoordinateIterator(PixelIterator):
    """Row-major cursor yielding (x, y, pixel) tuples."""

    def __next__(self) -> Tuple[int, int, Any]:
        item = self._advance()
        if item is None:
            raise StopIteration
        return item


class Image(Generic[T]):
    """
    Generic 2D pixel grid.

    Pixels are addressed as (x, y) with 0 <= x < width and 0 <= y < height,
    stored row-major. ``pixel_type`` tags the element type for the numeric
    engines; untagged images (``None``) hold arbitrary comparable objects.
    """

    def __init__(self, width: int, height: int, pixels: Sequence[T], pixel_type: Optional[PixelType] = None):
        """
        Initialize from a flat row-major pixel sequence.

        Args:
            width: Image width; negative values are clamped to 0
            height: Image height; negative values are clamped to 0
            pixels: Row-major pixels; extra pixels beyond width * height are dropped
            pixel_type: Element type tag, or None for untagged objects

        Raises:
            PixelCountError: If fewer than width * height pixels are given
        """
        width, height, given, array = _flat_storage(width, height, pixels, pixel_type)
        if array is None:
            raise PixelCountError(width, height, given)
        self._init_parts(DirectIndexer(width, height), PixelBuffer(array), pixel_type)

    def _init_parts(self, indexer: Indexer, buffer: PixelBuffer, pixel_type: Optional[PixelType]) -> None:
        self._indexer = indexer
        self._pixel_type = pixel_type
        self._handle = BufferHandle(self, buffer)

    # ===== Factory Methods =====

    @classmethod
    def _from_parts(cls, indexer: Indexer, buffer: PixelBuffer, pixel_type: Optional[PixelType]) -> "Image":
        image = cls.__new__(cls)
        image._init_parts(indexer, buffer, pixel_type)
        return image

    @classmethod
    def _from_storage(cls, width: int, height: int, array: np.ndarray, pixel_type: Optional[PixelType]) -> "Image":
        return cls._from_parts(DirectIndexer(width, height), PixelBuffer(array), pixel_type)

    @classmethod
    def from_pixels(
        cls, width: int, height: int, pixels: Sequence[T], pixel_type: Optional[PixelType] = None
    ) -> Optional["Image[T]"]:
        """Fallible constructor: returns None instead of raising on a pixel shortfall."""
        width, height, given, array = _flat_storage(width, height, pixels, pixel_type)
        if array is None:
            logger.debug(f"Rejected {width}x{height} image: only {given} pixels")
            return None
        return cls._from_storage(width, height, array, pixel_type)

    @classmethod
    def filled(cls, width: int, height: int, value: T, pixel_type: Optional[PixelType] = None) -> "Image[T]":
        """Create an image with every pixel set to ``value``."""
        width = max(int(width), 0)
        height = max(int(height), 0)
        check_pixel(value, pixel_type)

        array = np.empty(width * height, dtype=storage_dtype(pixel_type))
        array.fill(value)
        return cls._from_storage(width, height, array, pixel_type)

    @classmethod
    def from_array(cls, array: np.ndarray, pixel_type: Optional[PixelType] = None) -> "Image":
        """
        Create from a numpy array.

        Args:
            array: (height, width) for scalar pixels, (height, width, 4) for RGBA
            pixel_type: Element type tag

        Raises:
            ValueError: If the array shape does not match the pixel type
        """
        array = np.asarray(array)

        if pixel_type is PixelType.RGBA:
            if array.ndim != 3 or array.shape[2] != RGBA_CHANNELS:
                raise ValueError(f"Expected (H, W, {RGBA_CHANNELS}) array for RGBA, got {array.shape}")
            height, width = array.shape[:2]
            pixels = [RGBA(*channels) for channels in array.reshape(-1, RGBA_CHANNELS).tolist()]
            return cls(width, height, pixels, pixel_type)

        if array.ndim != 2:
            raise ValueError(f"Expected (H, W) array, got {array.shape}")
        height, width = array.shape
        return cls(width, height, array.ravel(), pixel_type)

    # ===== Properties =====

    @property
    def width(self) -> int:
        return self._indexer.width

    @property
    def height(self) -> int:
        return self._indexer.height

    @property
    def pixel_type(self) -> Optional[PixelType]:
        return self._pixel_type

    @property
    def indexer(self) -> Indexer:
        """Indexing strategy (DirectIndexer, or OffsetIndexer for crops)."""
        return self._indexer

    @property
    def pixels(self) -> List[T]:
        """Row-major list of pixels."""
        return self._gather().ravel().tolist()

    def __len__(self) -> int:
        return self.width * self.height

    # ===== Coordinate Access =====

    def index(self, x: int, y: int) -> Optional[int]:
        """Buffer offset of (x, y), or None when out of bounds."""
        if x < 0 or x >= self.width or y < 0 or y >= self.height:
            return None
        return self._indexer.index(x, y)

    def get(self, x: int, y: int) -> Optional[T]:
        offset = self.index(x, y)
        if offset is None:
            return None
        return self._handle.buffer.read(offset)

    def set(self, x: int, y: int, value: T) -> None:
        """
        Overwrite (x, y); silently ignored when out of bounds.

        FLOAT images store float32, so ``get`` returns the value rounded to
        the nearest float32. GRAY and INT values must be in-range integers.

        Raises:
            ValueError: If the value cannot be stored exactly in a GRAY or INT image
        """
        offset = self.index(x, y)
        if offset is None:
            return
        check_pixel(value, self._pixel_type)
        self._handle.writable().write(offset, value)

    def __getitem__(self, key):
        if _is_index(key):
            return self.row(key)
        if isinstance(key, (slice, range)):
            return self.rows(key)
        if isinstance(key, tuple) and len(key) == 2:
            if _is_index(key[0]) and _is_index(key[1]):
                return self.get(key[0], key[1])
            return self.crop(key[0], key[1])
        raise TypeError(f"Invalid image subscript: {key!r}")

    def __setitem__(self, key, value) -> None:
        if _is_index(key):
            self.set_row(key, value)
        elif isinstance(key, tuple) and len(key) == 2 and _is_index(key[0]) and _is_index(key[1]):
            self.set(key[0], key[1], value)
        else:
            raise TypeError(f"Invalid image subscript for assignment: {key!r}")

    # ===== Views =====

    def crop(self, x_range: RangeLike, y_range: RangeLike) -> Optional["Image[T]"]:
        """
        Return a view of the region, sharing this image's storage.

        Returns None if either range's start or inclusive end lies outside
        the image.
        """
        x_range = to_range(x_range, self.width)
        y_range = to_range(y_range, self.height)
        if not (_valid_range(x_range, self.width) and _valid_range(y_range, self.height)):
            return None

        logger.debug(f"Crop x={x_range.start}:{x_range.stop} y={y_range.start}:{y_range.stop} of {self.width}x{self.height}")
        return self._from_parts(self._indexer.cropped(x_range, y_range), self._handle.buffer, self._pixel_type)

    def row(self, y: int) -> Row:
        return Row(self, y)

    def column(self, x: int) -> Column:
        return Column(self, x)

    def rows(self, y_range: RangeLike) -> RowRange:
        return RowRange(self, to_range(y_range, self.height))

    def set_row(self, y: int, row: Sequence[Optional[T]]) -> None:
        """Write a row back into this image; ignored unless len(row) == width."""
        if len(row) != self.width:
            return
        for x in range(self.width):
            value = row[x]
            if value is not None:
                self.set(x, y, value)

    # ===== Iteration =====

    def __iter__(self) -> Iterator[T]:
        return PixelIterator(self)

    def enumerate(self) -> Iterator[Tuple[int, int, T]]:
        """Fresh iterator of (x, y, pixel) in row-major order."""
        return CoordinateIterator(self)

    # ===== Higher-order Methods =====

    def map(self, transform: Callable[[T], U], pixel_type: Optional[PixelType] = None) -> "Image[U]":
        """Return a new image of ``transform(pixel)``; ``pixel_type`` tags the result."""
        return Image(self.width, self.height, [transform(pixel) for pixel in self], pixel_type)

    def map_with_coordinates(
        self, transform: Callable[[int, int, T], U], pixel_type: Optional[PixelType] = None
    ) -> "Image[U]":
        """Return a new image of ``transform(x, y, pixel)``."""
        return Image(self.width, self.height, [transform(x, y, pixel) for x, y, pixel in self.enumerate()], pixel_type)

    def map_with_index(self, transform: Callable[[int, T], U], pixel_type: Optional[PixelType] = None) -> "Image[U]":
        """Return a new image of ``transform(i, pixel)`` with i the row-major position."""
        return Image(self.width, self.height, [transform(i, pixel) for i, pixel in enumerate(self)], pixel_type)

    def reduce(self, initial: U, combine: Callable[[U, T], U]) -> U:
        return functools.reduce(combine, self, initial)

    def update(self, transform: Callable[[T], T]) -> None:
        """Rewrite every pixel in place."""
        buffer = self._handle.writable()
        for offset in self._indexer.offsets().ravel().tolist():
            value = transform(buffer.read(offset))
            check_pixel(value, self._pixel_type)
            buffer.write(offset, value)

    # ===== Geometry =====

    def remapped(self, offsets: np.ndarray) -> "Image[T]":
        """
        Materialize a new image from a grid of this image's coordinates.

        Args:
            offsets: (height, width) grid of buffer offsets as produced by
                ``indexer.offsets()`` and rearranged

        Returns:
            New image with its own storage
        """
        height, width = offsets.shape
        array = self._handle.buffer.gather(offsets).ravel()
        return self._from_storage(width, height, array, self._pixel_type)

    def flip_horizontal(self) -> "Image[T]":
        return geometry.flip_horizontal(self)

    def flip_vertical(self) -> "Image[T]":
        return geometry.flip_vertical(self)

    def rotate(self, times: int = 1) -> "Image[T]":
        """Rotate clockwise by 90 degrees ``times`` times (negative is counter-clockwise)."""
        return geometry.rotate(self, times)

    def convolved(self, kernel: "Image[int]") -> "Image[T]":
        from ..processing.convolution import convolve

        return convolve(self, kernel)

    # ===== Format Conversion =====

    def _gather(self) -> np.ndarray:
        return self._handle.buffer.gather(self._indexer.offsets())

    def to_array(self) -> np.ndarray:
        """Return (height, width) pixels, or (height, width, 4) uint8 for RGBA."""
        grid = self._gather()
        if self._pixel_type is PixelType.RGBA:
            channels = np.array([pixel.as_tuple() for pixel in grid.ravel()], dtype=np.uint8)
            return channels.reshape(self.height, self.width, RGBA_CHANNELS)
        return grid

    # ===== Utility Methods =====

    def copy(self) -> "Image[T]":
        """Value copy; storage is shared until either side writes."""
        return self._from_parts(self._indexer, self._handle.buffer, self._pixel_type)

    __copy__ = copy

    def __eq__(self, other) -> bool:
        if not isinstance(other, Image):
            return NotImplemented
        if self.width != other.width or self.height != other.height:
            return False
        return all(a == b for a, b in zip(self, other))

    __hash__ = None

    def __repr__(self) -> str:
        type_name = self._pixel_type.name if self._pixel_type is not None else None
        return f"Image(width={self.width}, height={self.height}, pixel_type={type_name})"
