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

__all__ = ("BLACK", "WHITE", "Colour", "ColourRamp", "FitsImageOptions", "ScalingMode")

import enum
from typing import Annotated

import numpy as np
import pydantic

_Channel = Annotated[int, pydantic.Field(ge=0, le=255)]


class ScalingMode(enum.StrEnum):
    """How pixel values are mapped onto a colour ramp.

    Values are matched ignoring case and underscores, so ``"DataMinMax"``
    and ``"DATA_MIN_MAX"`` both select `DATA_MIN_MAX`.
    """

    AUTOMATIC = "automatic"
    """Map the representable range of the pixel type, floored at zero."""

    DATA_MIN_MAX = "data_min_max"
    """Map the minimum and maximum values actually present in the image."""

    @classmethod
    def _missing_(cls, value: object) -> ScalingMode | None:
        if isinstance(value, str):
            key = value.replace("_", "").lower()
            for member in cls:
                if member.value.replace("_", "") == key:
                    return member
        return None


class Colour(pydantic.BaseModel):
    """An 8-bit-per-channel RGBA colour."""

    red: _Channel
    green: _Channel
    blue: _Channel
    alpha: _Channel = 255

    model_config = pydantic.ConfigDict(frozen=True)

    def to_array(self) -> np.ndarray:
        """Return the channels as a ``float64`` array in ``(R, G, B, A)``
        order.
        """
        return np.array([self.red, self.green, self.blue, self.alpha], dtype=np.float64)

    @property
    def bgr(self) -> bytes:
        """The colour as the three bytes used by 24-bit rasters."""
        return bytes((self.blue, self.green, self.red))


BLACK = Colour(red=0, green=0, blue=0)
WHITE = Colour(red=255, green=255, blue=255)


class ColourRamp(pydantic.BaseModel):
    """A linear interpolation between two colours."""

    start: Colour = BLACK
    """Colour of a blend factor of zero."""

    end: Colour = WHITE
    """Colour of a blend factor of one."""

    model_config = pydantic.ConfigDict(frozen=True)

    def blend(self, t: np.ndarray) -> np.ndarray:
        """Interpolate between the two endpoint colours.

        Parameters
        ----------
        t
            Blend factors of any shape; values are clamped to ``[0, 1]``.

        Returns
        -------
        colours
            ``uint8`` array with shape ``t.shape + (4,)`` holding
            ``(R, G, B, A)`` channels.  Channel values are truncated, not
            rounded.
        """
        t = np.clip(np.asarray(t, dtype=np.float64), 0.0, 1.0)[..., np.newaxis]
        start = self.start.to_array()
        return (start + t * (self.end.to_array() - start)).astype(np.uint8)

    def __getitem__(self, t: float) -> Colour:
        red, green, blue, alpha = (int(c) for c in self.blend(np.array(t)))
        return Colour(red=red, green=green, blue=blue, alpha=alpha)


class FitsImageOptions(pydantic.BaseModel):
    """Configuration options for rendering a `FitsImage`."""

    scaling: ScalingMode = ScalingMode.AUTOMATIC
    """How pixel values are normalized before being mapped to colours."""

    colours: ColourRamp = ColourRamp()
    """Colour ramp used to render normalized pixel values."""

    undefined_pixel_colour: Colour = BLACK
    """Colour for missing data.

    This is reserved for future use; no pixel is currently rendered with it.
    """

    model_config = pydantic.ConfigDict(frozen=True)

