"""
Convolution / mean filter engine.

The kernel is an integer-weighted Image. For each output pixel the kernel is
laid over the source with its center (width // 2, height // 2) on that
pixel and the weighted mean of the covered pixels is taken. Weights are
applied as-is (correlation, no kernel flip).

Border policy: if any part of the neighborhood falls outside the source the
original center pixel is kept unchanged. No padding, clamping or partial
mean is applied.
"""

import logging
from typing import Any, List, Optional, Tuple

from ..const import DEFAULT_KERNEL_SIZE
from ..core.image import Image
from ..core.pixel_types import PixelType
from ..errors import NonPositiveWeightSumError, UnsupportedPixelTypeError
from .pixel_algebra import algebra_for, weighted_mean

logger = logging.getLogger(__name__)

KERNEL_TYPES = (PixelType.INT, PixelType.GRAY)


def _kernel_taps(kernel: Image) -> List[Tuple[int, int, int]]:
    """(dx, dy, weight) relative to the kernel center."""
    center_x = kernel.width // 2
    center_y = kernel.height // 2
    return [(kx - center_x, ky - center_y, int(weight)) for kx, ky, weight in kernel.enumerate()]


def convolve(image: Image, kernel: Image) -> Image:
    """
    Return the weighted-mean filtered image.

    Args:
        image: Source image with a numeric pixel type
        kernel: INT or GRAY image of weights; its weights must sum to > 0

    Returns:
        New image of the same size and pixel type

    Raises:
        UnsupportedPixelTypeError: If the image or kernel type cannot be combined
        NonPositiveWeightSumError: If the kernel weights sum to zero or less
    """
    pixel_type = image.pixel_type
    algebra_for(pixel_type)
    if kernel.pixel_type not in KERNEL_TYPES:
        raise UnsupportedPixelTypeError(f"Kernel must hold integer weights, got {kernel.pixel_type!r}")

    taps = _kernel_taps(kernel)
    weight_sum = sum(weight for _, _, weight in taps)
    if weight_sum <= 0:
        raise NonPositiveWeightSumError(f"Kernel weights must sum to a positive value, got {weight_sum}")

    reach_left = kernel.width // 2
    reach_up = kernel.height // 2
    reach_right = kernel.width - 1 - reach_left
    reach_down = kernel.height - 1 - reach_up

    logger.debug(
        f"Convolving {image.width}x{image.height} {pixel_type.name} image with {kernel.width}x{kernel.height} kernel"
    )

    def filtered(x: int, y: int, pixel: Any) -> Any:
        inside = (
            x - reach_left >= 0
            and y - reach_up >= 0
            and x + reach_right < image.width
            and y + reach_down < image.height
        )
        if not inside:
            return pixel
        return weighted_mean(((weight, image.get(x + dx, y + dy)) for dx, dy, weight in taps), pixel_type)

    return image.map_with_coordinates(filtered, pixel_type)


def box_kernel(width: int = DEFAULT_KERNEL_SIZE, height: Optional[int] = None) -> Image:
    """All-ones INT kernel; square when height is omitted."""
    return Image.filled(width, width if height is None else height, 1, PixelType.INT)


def mean_filter(image: Image, size: int = DEFAULT_KERNEL_SIZE) -> Image:
    """Box blur with a size x size neighborhood."""
    return convolve(image, box_kernel(size))
