"""
Shared pytest fixtures for the pixelgrid test suite.

Provides small images of every pixel type used across the test modules.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add src to path so tests run without installing the package
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pixelgrid import RGBA, Image, PixelType  # noqa: E402
from pixelgrid.config import set_config  # noqa: E402


# =============================================================================
# Image Fixtures
# =============================================================================


@pytest.fixture
def gray_2x2() -> Image:
    """2x2 gray image [10, 20, 30, 40] (row-major)."""
    return Image(2, 2, [10, 20, 30, 40], PixelType.GRAY)


@pytest.fixture
def gray_4x4() -> Image:
    """4x4 gray image with pixel (x, y) = 10 * y + x."""
    return Image(4, 4, [10 * y + x for y in range(4) for x in range(4)], PixelType.GRAY)


@pytest.fixture
def int_3x2() -> Image:
    """3x2 int image [1..6] (row-major)."""
    return Image(3, 2, [1, 2, 3, 4, 5, 6], PixelType.INT)


@pytest.fixture
def random_gray() -> Image:
    """7x5 random gray image."""
    rng = np.random.default_rng(1234)
    return Image.from_array(rng.integers(0, 256, (5, 7), dtype=np.uint8), PixelType.GRAY)


@pytest.fixture
def rgba_2x2() -> Image:
    """2x2 opaque RGBA image."""
    return Image(
        2,
        2,
        [RGBA(255, 0, 0), RGBA(0, 255, 0), RGBA(0, 0, 255), RGBA(10, 20, 30)],
        PixelType.RGBA,
    )


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_config():
    """Ensure every test starts from the default configuration."""
    set_config(None)
    yield
    set_config(None)
