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

__all__ = (
    "FloatType",
    "IntegerType",
    "NumberType",
    "is_float",
    "is_integer",
)

import enum
from typing import Literal, TypeAlias, TypeGuard

import numpy as np
import numpy.typing as npt

from ._errors import FormatError


class NumberType(enum.StrEnum):
    """Enumeration of the FITS payload element encodings.

    Each member corresponds to exactly one legal ``BITPIX`` value.
    """

    uint8 = enum.auto()
    int16 = enum.auto()
    int32 = enum.auto()
    int64 = enum.auto()
    float32 = enum.auto()
    float64 = enum.auto()

    def to_numpy(self) -> type:
        """Convert an enumeration member to the corresponding numpy scalar
        type object.

        Returns
        -------
        scalar_type
            Numpy scalar type, e.g. `numpy.int16`.
        """
        return getattr(np, self.value)

    def to_big_endian(self) -> np.dtype:
        """Return the big-endian `numpy.dtype` used for this type on disk."""
        return np.dtype(self.to_numpy()).newbyteorder(">")

    @classmethod
    def from_numpy(cls, dtype: npt.DTypeLike) -> NumberType:
        """Construct an enumeration member from anything that can be coerced
        to `numpy.dtype`.

        Parameters
        ----------
        dtype
            Object convertible to `numpy.dtype`.

        Returns
        -------
        member
            Enumeration member.
        """
        return cls(np.dtype(dtype).name)

    @property
    def bitpix(self) -> int:
        """The FITS ``BITPIX`` value for this type."""
        return _TO_BITPIX[self]

    @property
    def byte_width(self) -> int:
        """Number of bytes in a single element."""
        return abs(self.bitpix) // 8

    @classmethod
    def from_bitpix(cls, bitpix: int) -> NumberType:
        """Construct an enumeration member from a FITS ``BITPIX`` value.

        Parameters
        ----------
        bitpix
            Header value; one of 8, 16, 32, 64, -32, -64.

        Returns
        -------
        member
            Enumeration member.

        Raises
        ------
        FormatError
            Raised if ``bitpix`` is not a legal value.
        """
        try:
            return _FROM_BITPIX[bitpix]
        except KeyError:
            raise FormatError(f"Unknown BITPIX value of {bitpix!r}.") from None


_TO_BITPIX = {
    NumberType.uint8: 8,
    NumberType.int16: 16,
    NumberType.int32: 32,
    NumberType.int64: 64,
    NumberType.float32: -32,
    NumberType.float64: -64,
}

_FROM_BITPIX = {v: k for k, v in _TO_BITPIX.items()}


IntegerType: TypeAlias = (
    Literal[NumberType.uint8]
    | Literal[NumberType.int16]
    | Literal[NumberType.int32]
    | Literal[NumberType.int64]
)

FloatType: TypeAlias = Literal[NumberType.float32] | Literal[NumberType.float64]


def is_float(t: NumberType) -> TypeGuard[FloatType]:
    """Test whether a `NumberType` corresponds to a floating-point type."""
    return t.bitpix < 0


def is_integer(t: NumberType) -> TypeGuard[IntegerType]:
    """Test whether a `NumberType` corresponds to an integer type."""
    return t.bitpix > 0
