"""
Row, column and row-range views over an Image.

Each view holds a value copy of the image it came from (storage is shared
copy-on-write). Writing through a view therefore changes the view's own copy
only; the source image sees the change only after an explicit write-back
such as ``image[y] = row`` or ``image.set_row(y, row)``.
"""

from typing import TYPE_CHECKING, Any, Iterator, Optional

if TYPE_CHECKING:
    from .image import Image


class Row:
    """One row of an image, indexable by x."""

    def __init__(self, image: "Image", y: int):
        self._image = image.copy()
        self._y = y

    @property
    def y(self) -> int:
        return self._y

    @property
    def image(self) -> "Image":
        """The view's own copy of the image."""
        return self._image

    def __len__(self) -> int:
        return self._image.width

    def __getitem__(self, x: int) -> Optional[Any]:
        return self._image.get(x, self._y)

    def __setitem__(self, x: int, value: Any) -> None:
        self._image.set(x, self._y, value)

    def __iter__(self) -> Iterator[Any]:
        # A row outside the image is empty
        if not 0 <= self._y < self._image.height:
            return
        for x in range(self._image.width):
            yield self._image.get(x, self._y)

    def __repr__(self) -> str:
        return f"Row(y={self._y}, width={len(self)})"


class Column:
    """One column of an image, indexable by y."""

    def __init__(self, image: "Image", x: int):
        self._image = image.copy()
        self._x = x

    @property
    def x(self) -> int:
        return self._x

    @property
    def image(self) -> "Image":
        """The view's own copy of the image."""
        return self._image

    def __len__(self) -> int:
        return self._image.height

    def __getitem__(self, y: int) -> Optional[Any]:
        return self._image.get(self._x, y)

    def __setitem__(self, y: int, value: Any) -> None:
        self._image.set(self._x, y, value)

    def __iter__(self) -> Iterator[Any]:
        if not 0 <= self._x < self._image.width:
            return
        for y in range(self._image.height):
            yield self._image.get(self._x, y)

    def __repr__(self) -> str:
        return f"Column(x={self._x}, height={len(self)})"


class RowRange:
    """
    Contiguous range of rows.

    ``rows[i]`` is the i-th row of the range (relative to ``y_range.start``)
    or None. ``rows[x0:x1]`` crops the image to the column range and this
    row range.
    """

    def __init__(self, image: "Image", y_range: range):
        self._image = image.copy()
        self._y_range = y_range

    @property
    def y_range(self) -> range:
        return self._y_range

    @property
    def image(self) -> "Image":
        """The view's own copy of the image."""
        return self._image

    def __len__(self) -> int:
        return len(self._y_range)

    def _is_invalid(self, i: int) -> bool:
        y = self._y_range.start + i
        return i < 0 or i >= len(self) or y < 0 or y >= self._image.height

    def __getitem__(self, key):
        if isinstance(key, (slice, range)):
            return self._image.crop(key, self._y_range)
        if self._is_invalid(key):
            return None
        return self._image.row(self._y_range.start + key)

    def __setitem__(self, i: int, row) -> None:
        if self._is_invalid(i) or row is None:
            return
        self._image.set_row(self._y_range.start + i, row)

    def __iter__(self) -> Iterator["Row"]:
        i = 0
        while not self._is_invalid(i):
            yield self._image.row(self._y_range.start + i)
            i += 1

    def __repr__(self) -> str:
        return f"RowRange(y={self._y_range.start}:{self._y_range.stop})"
