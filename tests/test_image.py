"""
Unit tests for the Image container: construction, coordinate access,
cropping, iteration and copy-on-write storage.
"""

import copy

import numpy as np
import pytest

from pixelgrid import RGBA, Image, PixelCountError, PixelType
from pixelgrid.core.indexing import DirectIndexer, OffsetIndexer


class TestConstruction:
    """Test Image construction paths."""

    def test_exact_pixel_count(self):
        """Test construction with exactly width * height pixels."""
        img = Image(3, 2, [1, 2, 3, 4, 5, 6], PixelType.INT)

        assert img.width == 3
        assert img.height == 2
        assert len(img) == 6
        assert img.pixels == [1, 2, 3, 4, 5, 6]
        assert img.pixel_type is PixelType.INT

    def test_excess_pixels_truncated(self):
        """Test that pixels beyond width * height are dropped."""
        img = Image(2, 1, [1, 2, 3, 4], PixelType.INT)

        assert img.pixels == [1, 2]

    def test_shortfall_raises(self):
        """Test that too few pixels raise PixelCountError."""
        with pytest.raises(PixelCountError, match="at least 4"):
            Image(2, 2, ["a", "b", "c"])

    def test_shortfall_is_value_error(self):
        """Test PixelCountError can be caught as ValueError."""
        with pytest.raises(ValueError):
            Image(2, 2, [1])

    def test_from_pixels_shortfall_returns_none(self):
        """Test the fallible constructor yields no image on shortfall."""
        assert Image.from_pixels(2, 2, ["a", "b", "c"]) is None

    def test_from_pixels_success(self):
        """Test the fallible constructor on valid input."""
        img = Image.from_pixels(2, 2, ["a", "b", "c", "d"])

        assert img is not None
        assert img.get(1, 1) == "d"

    def test_negative_dimensions_clamped(self):
        """Test negative width/height clamp to zero."""
        img = Image(-3, 5, [])

        assert img.width == 0
        assert img.height == 5
        assert len(img) == 0
        assert list(img) == []

    def test_generator_input(self):
        """Test construction from a generator."""
        img = Image(2, 2, (v for v in range(4)), PixelType.INT)

        assert img.pixels == [0, 1, 2, 3]

    def test_two_dimensional_array_input(self):
        """Test an ndarray is counted by elements, not rows."""
        img = Image(2, 2, np.array([[1, 2], [3, 4]]), PixelType.INT)

        assert img.pixels == [1, 2, 3, 4]

    def test_two_dimensional_array_shortfall(self):
        with pytest.raises(PixelCountError, match="got 4"):
            Image(3, 2, np.array([[1, 2], [3, 4]]), PixelType.INT)

    def test_input_not_aliased(self):
        """Test that the caller's array is copied."""
        source = np.array([1, 2, 3, 4], dtype=np.int64)
        img = Image(2, 2, source, PixelType.INT)
        source[0] = 99

        assert img.get(0, 0) == 1

    def test_gray_range_validated(self):
        """Test gray pixels outside 0..255 are rejected."""
        with pytest.raises(ValueError, match="Gray pixels"):
            Image(1, 1, [256], PixelType.GRAY)

    def test_filled(self):
        """Test default-fill construction."""
        img = Image.filled(3, 2, 7, PixelType.GRAY)

        assert img.width == 3
        assert img.height == 2
        assert all(p == 7 for p in img)

    def test_filled_rgba(self):
        """Test default-fill with RGBA pixels."""
        img = Image.filled(2, 2, RGBA(1, 2, 3, 4), PixelType.RGBA)

        assert img.pixels == [RGBA(1, 2, 3, 4)] * 4

    def test_tuple_pixels_untagged(self):
        """Test that tuple pixels are stored as single elements."""
        img = Image(2, 1, [(0, 1), (2, 3)])

        assert img.get(1, 0) == (2, 3)


class TestCoordinateAccess:
    """Test get/set/index and subscripts."""

    def setup_method(self):
        self.img = Image(3, 2, [1, 2, 3, 4, 5, 6], PixelType.INT)

    def test_get_in_bounds(self):
        assert self.img.get(0, 0) == 1
        assert self.img.get(2, 1) == 6

    @pytest.mark.parametrize("x,y", [(-1, 0), (3, 0), (0, -1), (0, 2)])
    def test_get_out_of_bounds(self, x, y):
        assert self.img.get(x, y) is None
        assert self.img.index(x, y) is None

    def test_index(self):
        assert self.img.index(1, 1) == 4

    def test_set_then_get(self):
        """Test set(x, y, v) followed by get(x, y) returns v for every coordinate."""
        for y in range(self.img.height):
            for x in range(self.img.width):
                self.img.set(x, y, 100 + x + y * 10)
                assert self.img.get(x, y) == 100 + x + y * 10

    def test_set_out_of_bounds_is_noop(self):
        before = self.img.pixels
        self.img.set(5, 5, 42)
        self.img.set(-1, 0, 42)

        assert self.img.pixels == before

    def test_subscript_pixel(self):
        assert self.img[1, 0] == 2
        assert self.img[3, 0] is None

    def test_subscript_assignment(self):
        self.img[2, 1] = 60

        assert self.img.get(2, 1) == 60

    def test_invalid_subscript(self):
        with pytest.raises(TypeError):
            self.img["a"]

    def test_python_scalars_returned(self):
        """Test pixels come back as plain Python values."""
        assert type(self.img.get(0, 0)) is int
        floats = Image(1, 1, [0.5], PixelType.FLOAT)
        assert type(floats.get(0, 0)) is float

    @pytest.mark.parametrize("value", [1.7, 2.0, "3", None])
    def test_int_rejects_non_integers(self, value):
        """Test INT pixels are never truncated or coerced on write."""
        with pytest.raises(ValueError, match="must be integers"):
            self.img.set(0, 0, value)

        assert self.img.get(0, 0) == 1

    @pytest.mark.parametrize("value", [2**63, -(2**63) - 1])
    def test_int_rejects_out_of_range(self, value):
        with pytest.raises(ValueError, match="Int pixels must be in"):
            self.img.set(0, 0, value)

    def test_int_accepts_numpy_integers(self):
        self.img.set(0, 0, np.int32(-7))

        assert self.img.get(0, 0) == -7

    def test_int_construction_rejects_floats(self):
        with pytest.raises(ValueError, match="must be integers"):
            Image(2, 1, [1, 2.5], PixelType.INT)
        with pytest.raises(ValueError, match="must be integers"):
            Image(2, 1, np.array([1.0, 2.0]), PixelType.INT)

    def test_gray_rejects_fractions(self):
        gray = Image(1, 1, [10], PixelType.GRAY)

        with pytest.raises(ValueError, match="Gray pixels must be integers"):
            gray.set(0, 0, 10.5)

    def test_float_stores_float32(self):
        """Test FLOAT pixels read back rounded to the nearest float32."""
        floats = Image(1, 1, [0.0], PixelType.FLOAT)
        floats.set(0, 0, 0.1)

        assert floats.get(0, 0) == float(np.float32(0.1))
        assert floats.get(0, 0) != 0.1

    def test_double_round_trips_exactly(self):
        doubles = Image(1, 1, [0.0], PixelType.DOUBLE)
        doubles.set(0, 0, 0.1)

        assert doubles.get(0, 0) == 0.1


class TestCrop:
    """Test zero-copy cropping."""

    def test_crop_scenario(self, gray_4x4):
        """Test cropping x=[1,3), y=[1,3) of a 4x4 image."""
        cropped = gray_4x4.crop(range(1, 3), range(1, 3))

        assert cropped is not None
        assert cropped.width == 2
        assert cropped.height == 2
        assert cropped.get(0, 0) == gray_4x4.get(1, 1)
        assert cropped.pixels == [11, 12, 21, 22]

    def test_crop_with_slices(self, gray_4x4):
        cropped = gray_4x4[1:3, 0:2]

        assert cropped.pixels == [1, 2, 11, 12]

    def test_crop_open_slices(self, gray_4x4):
        assert gray_4x4[:, :] == gray_4x4

    @pytest.mark.parametrize(
        "x_range,y_range",
        [
            (range(-1, 2), range(0, 2)),
            (range(0, 5), range(0, 2)),
            (range(0, 2), range(3, 5)),
            (range(4, 4), range(0, 1)),
            (range(0, 0), range(0, 1)),
            (range(3, 1), range(0, 1)),
        ],
    )
    def test_crop_out_of_bounds(self, gray_4x4, x_range, y_range):
        assert gray_4x4.crop(x_range, y_range) is None

    def test_empty_crop_inside(self, gray_4x4):
        """Test an empty range whose start and end-1 are both in bounds."""
        cropped = gray_4x4.crop(range(2, 2), range(0, 4))

        assert cropped is not None
        assert cropped.width == 0
        assert list(cropped) == []

    def test_crop_shares_storage(self, gray_4x4):
        cropped = gray_4x4.crop(range(1, 3), range(1, 3))

        assert cropped._handle.buffer is gray_4x4._handle.buffer
        assert isinstance(cropped.indexer, OffsetIndexer)

    def test_nested_crop_matches_single_crop(self, random_gray):
        """Test crop of crop equals one crop with the combined ranges."""
        outer = random_gray.crop(range(1, 6), range(1, 5))
        for x0 in range(outer.width):
            for x1 in range(x0 + 1, outer.width + 1):
                for y0 in range(outer.height):
                    for y1 in range(y0 + 1, outer.height + 1):
                        nested = outer.crop(range(x0, x1), range(y0, y1))
                        single = random_gray.crop(range(1 + x0, 1 + x1), range(1 + y0, 1 + y1))
                        assert nested == single

    def test_nested_crop_composes_offsets(self, gray_4x4):
        inner = gray_4x4.crop(range(1, 4), range(1, 4)).crop(range(1, 3), range(0, 2))

        assert inner.indexer == OffsetIndexer(2, 2, 2, 1, 4, 4)
        assert inner.pixels == [12, 13, 22, 23]

    def test_step_rejected(self, gray_4x4):
        with pytest.raises(ValueError, match="step 1"):
            gray_4x4.crop(range(0, 4, 2), range(0, 4))


class TestIteration:
    """Test iteration and enumeration order."""

    def test_row_major(self, int_3x2):
        assert list(int_3x2) == [1, 2, 3, 4, 5, 6]

    def test_restartable(self, int_3x2):
        assert list(int_3x2) == list(int_3x2)

    def test_exhausted_iterator_stays_exhausted(self, int_3x2):
        iterator = iter(int_3x2)
        assert len(list(iterator)) == 6
        assert list(iterator) == []

    def test_enumerate(self, int_3x2):
        assert list(int_3x2.enumerate()) == [
            (0, 0, 1),
            (1, 0, 2),
            (2, 0, 3),
            (0, 1, 4),
            (1, 1, 5),
            (2, 1, 6),
        ]

    def test_iterate_crop(self, gray_4x4):
        assert list(gray_4x4[1:3, 2:4]) == [21, 22, 31, 32]

    def test_empty_height(self):
        assert list(Image(3, 0, [], PixelType.INT)) == []

    def test_write_after_iter_not_observed(self):
        """Test a live iterator keeps yielding the pixels it started with."""
        img = Image(2, 1, [1, 2], PixelType.INT)
        iterator = iter(img)
        img.set(1, 0, 50)

        assert list(iterator) == [1, 2]
        assert img.pixels == [1, 50]

    def test_write_during_loop_not_observed(self, int_3x2):
        seen = []
        for pixel in int_3x2:
            seen.append(pixel)
            int_3x2.set(2, 0, 99)

        assert seen == [1, 2, 3, 4, 5, 6]
        assert int_3x2.get(2, 0) == 99

    def test_write_during_enumerate_not_observed(self, int_3x2):
        pixels = []
        for x, y, pixel in int_3x2.enumerate():
            pixels.append(pixel)
            int_3x2.set(x + 1, y, 0)

        assert pixels == [1, 2, 3, 4, 5, 6]

    def test_exhausted_iterator_releases_storage(self, gray_2x2):
        buffer = gray_2x2._handle.buffer
        iterator = iter(gray_2x2)
        assert buffer.holders == 2

        list(iterator)
        assert buffer.holders == 1


class TestCopyOnWrite:
    """Test that shared storage is privatized on first write."""

    def test_copy_is_independent(self, gray_2x2):
        duplicate = gray_2x2.copy()
        duplicate.set(0, 0, 99)

        assert gray_2x2.get(0, 0) == 10
        assert duplicate.get(0, 0) == 99

    def test_copy_module(self, gray_2x2):
        duplicate = copy.copy(gray_2x2)
        gray_2x2.set(1, 1, 0)

        assert duplicate.get(1, 1) == 40

    def test_crop_write_does_not_touch_parent(self, gray_4x4):
        cropped = gray_4x4.crop(range(1, 3), range(1, 3))
        cropped.set(0, 0, 200)

        assert gray_4x4.get(1, 1) == 11
        assert cropped.get(0, 0) == 200
        assert cropped.get(1, 1) == 22

    def test_parent_write_does_not_touch_crop(self, gray_4x4):
        cropped = gray_4x4.crop(range(1, 3), range(1, 3))
        gray_4x4.set(1, 1, 200)

        assert cropped.get(0, 0) == 11

    def test_unshared_write_in_place(self, gray_2x2):
        buffer = gray_2x2._handle.buffer
        gray_2x2.set(0, 0, 1)

        assert gray_2x2._handle.buffer is buffer

    def test_released_holder_stops_sharing(self, gray_2x2):
        duplicate = gray_2x2.copy()
        buffer = gray_2x2._handle.buffer
        assert buffer.holders == 2

        del duplicate
        assert buffer.holders == 1

        gray_2x2.set(0, 0, 1)
        assert gray_2x2._handle.buffer is buffer


class TestEqualityAndArrays:
    """Test equality and numpy conversions."""

    def test_equal(self, gray_2x2):
        assert gray_2x2 == Image(2, 2, [10, 20, 30, 40], PixelType.GRAY)

    def test_not_equal_dimensions(self, gray_2x2):
        assert gray_2x2 != Image(4, 1, [10, 20, 30, 40], PixelType.GRAY)

    def test_not_equal_other_type(self, gray_2x2):
        assert gray_2x2 != [10, 20, 30, 40]

    def test_to_array_gray(self, gray_2x2):
        array = gray_2x2.to_array()

        assert array.shape == (2, 2)
        assert array.dtype == np.uint8
        assert np.array_equal(array, [[10, 20], [30, 40]])

    def test_to_array_rgba(self, rgba_2x2):
        array = rgba_2x2.to_array()

        assert array.shape == (2, 2, 4)
        assert tuple(array[1, 1]) == (10, 20, 30, 255)

    def test_from_array_round_trip(self, rgba_2x2):
        assert Image.from_array(rgba_2x2.to_array(), PixelType.RGBA) == rgba_2x2

    def test_from_array_bad_shape(self):
        with pytest.raises(ValueError, match="Expected"):
            Image.from_array(np.zeros((2, 2, 3), dtype=np.uint8), PixelType.RGBA)
        with pytest.raises(ValueError, match="Expected"):
            Image.from_array(np.zeros(4), PixelType.DOUBLE)

    def test_direct_indexer(self, gray_2x2):
        assert gray_2x2.indexer == DirectIndexer(2, 2)

    def test_repr(self, gray_2x2):
        assert repr(gray_2x2) == "Image(width=2, height=2, pixel_type=GRAY)"
