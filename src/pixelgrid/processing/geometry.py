"""
Geometry engine - flips and quarter-turn rotations.

Every operation is a closed-form remap of the source's offset grid followed
by a single gather, so crops of crops rotate as cheaply as plain images and
the result always owns fresh storage.
"""

import logging
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from ..core.image import Image

logger = logging.getLogger(__name__)


def flip_horizontal(image: "Image") -> "Image":
    """output(x, y) = input(width - 1 - x, y)"""
    return image.remapped(image.indexer.offsets()[:, ::-1])


def flip_vertical(image: "Image") -> "Image":
    """output(x, y) = input(x, height - 1 - y)"""
    return image.remapped(image.indexer.offsets()[::-1, :])


def rotate(image: "Image", times: int = 1) -> "Image":
    """
    Rotate by ``times`` quarter turns clockwise.

    ``times`` is taken modulo 4, so negative values turn counter-clockwise.
    Quarter and three-quarter turns swap width and height:
    - 1: output(x, y) = input(y, height - 1 - x)
    - 2: output(x, y) = input(width - 1 - x, height - 1 - y)
    - 3: output(x, y) = input(width - 1 - y, x)

    Args:
        image: Source image
        times: Number of clockwise quarter turns

    Returns:
        New image with its own storage (also for times % 4 == 0)
    """
    turns = times % 4
    offsets = image.indexer.offsets()
    # np.rot90 turns counter-clockwise for positive k
    rotated = np.rot90(offsets, k=-turns)
    logger.debug(f"Rotating {image.width}x{image.height} by {turns} quarter turn(s)")
    return image.remapped(rotated)
