# This file is part of lsst-fitsstream.
#
# Developed for the LSST Data Management System.
# This product includes software developed by the LSST Project
# (https://www.lsst.org).
# See the COPYRIGHT file at the top-level directory of this distribution
# for details of code ownership.
#
# Use of this source code is governed by a 3-clause BSD-style
# license that can be found in the LICENSE file.

from __future__ import annotations

import unittest
from collections.abc import Sequence

import numpy as np
import pydantic

from lsst.fitsstream import (
    BLACK,
    WHITE,
    ArgumentError,
    Colour,
    ColourRamp,
    DataArray,
    DataUnitType,
    FitsImage,
    FitsImageOptions,
    Header,
    HeaderDataUnit,
    NumberType,
    ScalingMode,
    UnsupportedTypeError,
)


def make_unit(
    values: np.ndarray | None,
    number_type: NumberType = NumberType.int16,
    type: DataUnitType = DataUnitType.IMAGE,
    shape: Sequence[int] | None = None,
) -> HeaderDataUnit:
    """Make a unit with a single group from a numpy-ordered array."""
    if values is None:
        return HeaderDataUnit(Header(), type)
    values = np.asarray(values)
    group = DataArray(shape if shape is not None else values.shape[::-1], number_type)
    for offset, value in enumerate(values.flat):
        group[offset] = value.item()
    return HeaderDataUnit(Header(), type, [group])


class FitsImageTestCase(unittest.TestCase):
    """Tests for FitsImage and its options."""

    def setUp(self) -> None:
        self.ramp = ColourRamp(
            start=Colour(red=10, green=20, blue=30, alpha=40),
            end=Colour(red=210, green=120, blue=230, alpha=240),
        )
        self.min_max = FitsImageOptions(scaling=ScalingMode.DATA_MIN_MAX, colours=self.ramp)

    def test_errors(self) -> None:
        """Test units that cannot be images."""
        for unit_type in [DataUnitType.BINARY_TABLE, DataUnitType.TABLE, DataUnitType.UNKNOWN]:
            with self.assertRaises(ArgumentError):
                FitsImage(make_unit(np.zeros((2, 2)), type=unit_type))
        with self.assertRaises(ArgumentError):
            FitsImage(make_unit(np.zeros(4)))
        for number_type in [NumberType.float32, NumberType.float64]:
            with self.assertRaises(UnsupportedTypeError):
                FitsImage(make_unit(np.zeros((2, 2)), number_type))
        self.assertTrue(issubclass(ArgumentError, ValueError))
        self.assertTrue(issubclass(UnsupportedTypeError, TypeError))

    def test_empty(self) -> None:
        """Test a unit with no data."""
        for unit_type in [DataUnitType.PRIMARY, DataUnitType.IMAGE]:
            image = FitsImage(make_unit(None, type=unit_type))
            self.assertEqual((image.width, image.height), (0, 0))
            self.assertEqual((image.min_pixel_value, image.max_pixel_value), (0, 0))
            self.assertEqual(image.render().shape, (0, 0, 4))

    def test_statistics(self) -> None:
        """Test pixel extraction and statistics."""
        values = np.array([[5, -3, 7], [100, 0, 2]], dtype=np.int16)
        unit = make_unit(values)
        image = FitsImage(unit)
        self.assertEqual((image.width, image.height), (3, 2))
        self.assertEqual(image.min_pixel_value, -3)
        self.assertEqual(image.max_pixel_value, 100)
        self.assertEqual(image.pixels.dtype, np.dtype(np.int64))
        np.testing.assert_array_equal(image.pixels, values)
        group = unit.groups[0]
        for x in range(3):
            for y in range(2):
                self.assertEqual(image.pixels[y, x], group[(x, y)])
        with self.assertRaises(ValueError):
            image.pixels[0, 0] = 1

    def test_first_plane(self) -> None:
        """Test that only the first plane of a cube is used."""
        values = np.arange(24, dtype=np.int32).reshape(2, 3, 4) - 5
        image = FitsImage(make_unit(values, NumberType.int32))
        self.assertEqual((image.width, image.height), (4, 3))
        np.testing.assert_array_equal(image.pixels, values[0])
        self.assertEqual(image.min_pixel_value, -5)
        self.assertEqual(image.max_pixel_value, 6)

    def test_data_min_max(self) -> None:
        """Test DATA_MIN_MAX scaling through a colour ramp."""
        image = FitsImage(make_unit(np.array([[0, 10], [20, 30]]), NumberType.uint8), self.min_max)
        self.assertEqual((image.scale_min, image.scale_max), (0, 30))
        self.assertEqual(image.colour_at(0), self.ramp.start)
        self.assertEqual(image.colour_at(30), self.ramp.end)
        self.assertEqual(image.colour_at(15), Colour(red=110, green=70, blue=130, alpha=140))
        self.assertEqual(image.colour_at(-100), self.ramp.start)
        self.assertEqual(image.colour_at(1000), self.ramp.end)
        np.testing.assert_array_equal(image.blend_factors(), [[0.0, 1.0 / 3.0], [2.0 / 3.0, 1.0]])
        rendered = image.render()
        self.assertEqual(rendered.shape, (2, 2, 4))
        self.assertEqual(rendered.dtype, np.dtype(np.uint8))
        np.testing.assert_array_equal(rendered[0, 0], [10, 20, 30, 40])
        np.testing.assert_array_equal(rendered[1, 1], [210, 120, 230, 240])

    def test_constant(self) -> None:
        """Test DATA_MIN_MAX scaling of an image with one distinct value."""
        image = FitsImage(make_unit(np.full((2, 2), 9)), self.min_max)
        self.assertEqual((image.scale_min, image.scale_max), (9, 9))
        self.assertEqual(image.colour_at(9), self.ramp.end)
        self.assertEqual(image.colour_at(8), self.ramp.start)
        np.testing.assert_array_equal(image.blend_factors(), np.ones((2, 2)))

    def test_automatic(self) -> None:
        """Test AUTOMATIC scaling, which starts at zero for all types."""
        for number_type, maximum in [
            (NumberType.uint8, 255),
            (NumberType.int16, 32767),
            (NumberType.int32, 2147483647),
            (NumberType.int64, 9223372036854775807),
        ]:
            image = FitsImage(make_unit(np.array([[-7, 1], [2, 3]]) % 200, number_type))
            self.assertEqual((image.scale_min, image.scale_max), (0, maximum))
        image = FitsImage(make_unit(np.array([[-7, 0], [32767, 1000]]), NumberType.int16))
        self.assertEqual(image.options, FitsImageOptions())
        self.assertEqual(image.min_pixel_value, -7)
        self.assertEqual(image.colour_at(-7), BLACK)
        self.assertEqual(image.colour_at(0), BLACK)
        self.assertEqual(image.colour_at(32767), WHITE)
        grey = image.colour_at(16384)
        self.assertEqual((grey.red, grey.green, grey.blue, grey.alpha), (127, 127, 127, 255))

    def test_options(self) -> None:
        """Test configuring options from plain data."""
        options = FitsImageOptions.model_validate(
            {
                "scaling": "data_min_max",
                "colours": {
                    "start": {"red": 1, "green": 2, "blue": 3},
                    "end": {"red": 4, "green": 5, "blue": 6},
                },
            }
        )
        self.assertIs(options.scaling, ScalingMode.DATA_MIN_MAX)
        self.assertEqual(options.colours.start, Colour(red=1, green=2, blue=3, alpha=255))
        self.assertEqual(options.undefined_pixel_colour, BLACK)
        self.assertEqual(FitsImageOptions.model_validate_json(options.model_dump_json()), options)
        default = FitsImageOptions()
        self.assertIs(default.scaling, ScalingMode.AUTOMATIC)
        self.assertEqual(default.colours, ColourRamp(start=BLACK, end=WHITE))
        with self.assertRaises(pydantic.ValidationError):
            Colour(red=256, green=0, blue=0)
        for spelling, mode in [
            ("Automatic", ScalingMode.AUTOMATIC),
            ("DataMinMax", ScalingMode.DATA_MIN_MAX),
            ("DATA_MIN_MAX", ScalingMode.DATA_MIN_MAX),
        ]:
            self.assertIs(ScalingMode(spelling), mode)
            self.assertIs(FitsImageOptions.model_validate({"scaling": spelling}).scaling, mode)
            self.assertIs(FitsImageOptions.model_validate_json(f'{{"scaling": "{spelling}"}}').scaling, mode)
        with self.assertRaises(ValueError):
            ScalingMode("Data Min Max")
        with self.assertRaises(pydantic.ValidationError):
            FitsImageOptions(scaling="logarithmic")
        with self.assertRaises(pydantic.ValidationError):
            default.scaling = ScalingMode.DATA_MIN_MAX  # type: ignore[misc]

    def test_ramp(self) -> None:
        """Test ColourRamp interpolation directly."""
        ramp = ColourRamp(
            start=Colour(red=0, green=0, blue=0, alpha=0),
            end=Colour(red=255, green=100, blue=3),
        )
        self.assertEqual(ramp[0.5], Colour(red=127, green=50, blue=1, alpha=127))
        self.assertEqual(ramp[-1.0], ramp.start)
        self.assertEqual(ramp[2.0], ramp.end)
        self.assertEqual(ramp.end.bgr, bytes([3, 100, 255]))
        np.testing.assert_array_equal(ramp.blend(np.zeros((3, 2))), np.zeros((3, 2, 4), dtype=np.uint8))


if __name__ == "__main__":
    unittest.main()
