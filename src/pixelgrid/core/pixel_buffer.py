"""
Copy-on-write pixel storage shared between images.

A PixelBuffer wraps a flat numpy array and counts the images currently
holding it. Images attach when they are created over a buffer (including
crops and value copies) and detach when they are collected or privatize.
Writing through a holder of a shared buffer first gives that holder its own
copy, so other holders never observe the write.

Copy-on-write here is a single-thread optimization. It is not a concurrency
primitive.
"""

import logging
import weakref
from typing import Any

import numpy as np

logger = logging.getLogger(__name__)


class PixelBuffer:
    """Flat pixel array plus a holder count."""

    def __init__(self, array: np.ndarray):
        """
        Initialize storage.

        Args:
            array: 1-D storage array; the buffer takes ownership of it
        """
        self._array = array
        self._holders = 0

    @property
    def array(self) -> np.ndarray:
        """Underlying array. Callers must not write to it directly."""
        return self._array

    @property
    def holders(self) -> int:
        return self._holders

    @property
    def is_shared(self) -> bool:
        return self._holders > 1

    def __len__(self) -> int:
        return len(self._array)

    def attach(self) -> None:
        self._holders += 1

    def detach(self) -> None:
        self._holders = max(self._holders - 1, 0)

    def read(self, offset: int) -> Any:
        """Return the element at ``offset`` as a Python value."""
        return self._array.item(offset)

    def write(self, offset: int, value: Any) -> None:
        self._array[offset] = value

    def gather(self, offsets: np.ndarray) -> np.ndarray:
        """Return a new array with the elements at ``offsets`` (any shape)."""
        return self._array[offsets]

    def clone(self) -> "PixelBuffer":
        """Return an unshared copy of this storage."""
        logger.debug(f"Copy-on-write: copying {len(self._array)} pixels ({self._holders} holders)")
        return PixelBuffer(self._array.copy())


class BufferHandle:
    """
    One holder's reference to a PixelBuffer.

    The handle registers the holder with the buffer and releases it again
    when the owning object is garbage collected.
    """

    def __init__(self, owner: object, buffer: PixelBuffer):
        self._owner_ref = weakref.ref(owner)
        self._buffer = buffer
        self._finalizer = self._bind(owner, buffer)

    @staticmethod
    def _bind(owner: object, buffer: PixelBuffer) -> weakref.finalize:
        buffer.attach()
        return weakref.finalize(owner, buffer.detach)

    @property
    def buffer(self) -> PixelBuffer:
        return self._buffer

    def release(self) -> None:
        """Stop holding the buffer before the owner is collected."""
        self._finalizer()

    def writable(self) -> PixelBuffer:
        """Return storage safe to mutate, privatizing it first if shared."""
        if self._buffer.is_shared:
            private = self._buffer.clone()
            # Running the finalizer releases the old buffer exactly once
            self._finalizer()
            self._finalizer = self._bind(self._owner_ref(), private)
            self._buffer = private
        return self._buffer
