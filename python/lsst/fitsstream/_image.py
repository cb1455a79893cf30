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

__all__ = ("FitsImage",)

from logging import getLogger
from typing import IO, final

import numpy as np

from lsst.resources import ResourcePathExpression

from ._dtypes import IntegerType, is_integer
from ._errors import ArgumentError, UnsupportedTypeError
from ._options import Colour, FitsImageOptions, ScalingMode
from ._unit import DataUnitType, HeaderDataUnit

_LOG = getLogger(__name__)


@final
class FitsImage:
    """A 2-d view of the first data array of an image unit, with the
    statistics needed to render it.

    Parameters
    ----------
    unit
        Header-data unit to extract pixels from.  Must be a primary or image
        extension unit.
    options, optional
        Rendering options.  Defaults to automatic scaling onto a black to
        white ramp.

    Raises
    ------
    ArgumentError
        Raised if ``unit`` is not an image or its first group has fewer than
        two axes.
    UnsupportedTypeError
        Raised if the pixels are floating-point.

    Notes
    -----
    Only the first group of the unit is used, and only the first plane of
    an array with more than two axes.  Pixels are stored as ``int64`` in a
    numpy array indexed ``[y, x]``.

    With `ScalingMode.AUTOMATIC`, the display range runs from zero to the
    largest value the pixel type can represent.  Negative pixel values are
    therefore always clamped to the start of the colour ramp; this is
    long-standing behavior, not an oversight.

    A unit with no data yields an empty 0x0 image.
    """

    def __init__(self, unit: HeaderDataUnit, options: FitsImageOptions | None = None):
        self._options = options if options is not None else FitsImageOptions()
        if unit.type is not DataUnitType.IMAGE and unit.type is not DataUnitType.PRIMARY:
            raise ArgumentError(f"Data unit is not an image (type is {unit.type}).")
        if not unit.groups:
            self._pixels = np.zeros((0, 0), dtype=np.int64)
            self._min = 0
            self._max = 0
            self._scale_min = 0
            self._scale_max = 0
            return
        data = unit.groups[0]
        if data.ndim < 2:
            raise ArgumentError(f"Images require at least 2 dimensions; got {data.ndim}.")
        number_type = data.number_type
        if not is_integer(number_type):
            raise UnsupportedTypeError(f"Cannot read images with pixels of type {number_type}.")
        width = data.extent(0)
        height = data.extent(1)
        plane = data.to_numpy().reshape(-1)[: width * height]
        self._pixels = plane.astype(np.int64).reshape(height, width)
        if self._pixels.size:
            self._min = int(self._pixels.min())
            self._max = int(self._pixels.max())
        else:
            self._min = 0
            self._max = 0
        match self._options.scaling:
            case ScalingMode.AUTOMATIC:
                self._scale_min = 0
                self._scale_max = _automatic_scale_max(number_type)
            case ScalingMode.DATA_MIN_MAX:
                self._scale_min = self._min
                self._scale_max = self._max
        _LOG.debug(
            "Extracted %dx%d image with pixel range [%d, %d] and display range [%d, %d].",
            width,
            height,
            self._min,
            self._max,
            self._scale_min,
            self._scale_max,
        )

    @property
    def options(self) -> FitsImageOptions:
        """Rendering options."""
        return self._options

    @property
    def width(self) -> int:
        """Number of columns (extent of FITS axis 1)."""
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        """Number of rows (extent of FITS axis 2)."""
        return self._pixels.shape[0]

    @property
    def pixels(self) -> np.ndarray:
        """Pixel values as a read-only ``int64`` array indexed ``[y, x]``."""
        view = self._pixels.view()
        view.flags.writeable = False
        return view

    @property
    def min_pixel_value(self) -> int:
        """Smallest pixel value in the image (0 if empty)."""
        return self._min

    @property
    def max_pixel_value(self) -> int:
        """Largest pixel value in the image (0 if empty)."""
        return self._max

    @property
    def scale_min(self) -> int:
        """Pixel value mapped to the start of the colour ramp."""
        return self._scale_min

    @property
    def scale_max(self) -> int:
        """Pixel value mapped to the end of the colour ramp."""
        return self._scale_max

    def blend_factors(self, values: np.ndarray | int | None = None) -> np.ndarray:
        """Compute the clamped, normalized position of pixel values on the
        colour ramp.

        Parameters
        ----------
        values, optional
            Values to normalize.  Defaults to all pixels in the image.

        Returns
        -------
        t
            ``float64`` array in ``[0, 1]`` with the shape of ``values``.

        Notes
        -----
        When the display range is empty (e.g. an image with a single
        distinct value under `ScalingMode.DATA_MIN_MAX`), values at or above
        the range map to 1 and all others to 0.
        """
        if values is None:
            values = self._pixels
        values = np.asarray(values, dtype=np.float64)
        span = self._scale_max - self._scale_min
        if span == 0:
            return np.where(values >= self._scale_max, 1.0, 0.0)
        return np.clip((values - self._scale_min) / span, 0.0, 1.0)

    def render(self) -> np.ndarray:
        """Map all pixels through the colour ramp.

        Returns
        -------
        colours
            ``uint8`` array with shape ``(height, width, 4)`` holding
            ``(R, G, B, A)`` channels.
        """
        return self._options.colours.blend(self.blend_factors())

    def colour_at(self, value: int) -> Colour:
        """Return the colour a pixel with the given value is rendered as."""
        return self._options.colours[float(self.blend_factors(value))]

    def write_bmp(self, sink: IO[bytes] | ResourcePathExpression) -> None:
        """Write the image as an uncompressed 24-bit BMP.

        See `write_bmp` for details.
        """
        from ._raster import write_bmp

        write_bmp(self, sink)

    def write_tga(self, sink: IO[bytes] | ResourcePathExpression) -> None:
        """Write the image as an uncompressed 24-bit TGA.

        See `write_tga` for details.
        """
        from ._raster import write_tga

        write_tga(self, sink)

    def __str__(self) -> str:
        return f"FitsImage({self.width}x{self.height}, [{self._min}, {self._max}])"

    def __repr__(self) -> str:
        return f"FitsImage(..., width={self.width}, height={self.height}, options={self._options!r})"


def _automatic_scale_max(number_type: IntegerType) -> int:
    return int(np.iinfo(number_type.to_numpy()).max)
