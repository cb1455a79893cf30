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

__all__ = ("DataArray",)

import math
from collections.abc import Sequence
from typing import final

import numpy as np

from ._dtypes import NumberType


@final
class DataArray:
    """A dense, fixed-size multidimensional array of one FITS element type.

    Parameters
    ----------
    shape
        Extents of each axis, in FITS order (axis 0 varies fastest).
    number_type
        Element type of the array.

    Notes
    -----
    The shape and element type of a `DataArray` never change after
    construction.  Elements are addressed either by a linear offset into the
    backing buffer or by a full or partial N-d index; missing trailing
    indices are treated as zero.  The flattened offset of an index is::

        offset = index[0] + index[1]*shape[0] + index[2]*shape[0]*shape[1] + ...

    An array with no axes has no elements.
    """

    def __init__(self, shape: Sequence[int], number_type: NumberType):
        # Coerce to be defensive against numpy int scalars.
        self._shape = tuple(int(n) for n in shape)
        if any(n < 0 for n in self._shape):
            raise ValueError(f"Array extents must be non-negative; got {self._shape}.")
        self._number_type = NumberType(number_type)
        self._strides = tuple(math.prod(self._shape[:k]) for k in range(len(self._shape)))
        self._data = np.zeros(self.count, dtype=self._number_type.to_numpy())

    __slots__ = ("_data", "_number_type", "_shape", "_strides")

    @classmethod
    def from_buffer(cls, shape: Sequence[int], number_type: NumberType, buffer: bytes) -> DataArray:
        """Construct an array from big-endian bytes as they appear in a FITS
        data unit.

        Parameters
        ----------
        shape
            Extents of each axis, in FITS order.
        number_type
            Element type of the array.
        buffer
            Raw bytes; must hold exactly ``count`` elements.
        """
        result = cls(shape, number_type)
        result._data[:] = np.frombuffer(buffer, dtype=result._number_type.to_big_endian(), count=result.count)
        return result

    @property
    def number_type(self) -> NumberType:
        """Element type of the array."""
        return self._number_type

    @property
    def shape(self) -> tuple[int, ...]:
        """Extents of all axes, in FITS order (axis 0 first)."""
        return self._shape

    @property
    def ndim(self) -> int:
        """Number of axes."""
        return len(self._shape)

    @property
    def count(self) -> int:
        """Total number of elements."""
        if not self._shape:
            return 0
        return math.prod(self._shape)

    @property
    def nbytes(self) -> int:
        """Number of bytes the array occupies in a FITS data unit."""
        return self.count * self._number_type.byte_width

    @property
    def column_count(self) -> int:
        """Extent of axis 0, i.e. the number of columns of a 2-d array."""
        return self.extent(0)

    @property
    def row_count(self) -> int:
        """Extent of axis 1, i.e. the number of rows of a 2-d array."""
        return self.extent(1)

    def extent(self, axis: int) -> int:
        """Return the extent of the given axis, or zero if there is no such
        axis.
        """
        if 0 <= axis < len(self._shape):
            return self._shape[axis]
        return 0

    def flatten_index(self, *index: int) -> int:
        """Convert an N-d index into a linear offset.

        Indices beyond the dimensionality of the array are ignored and
        missing trailing indices are taken to be zero.  No bounds checking is
        performed.
        """
        return sum(i * stride for i, stride in zip(index, self._strides))

    def unflatten_index(self, offset: int) -> tuple[int, ...]:
        """Convert a linear offset into a full N-d index.

        This is the inverse of `flatten_index` for offsets in
        ``range(count)``.
        """
        if not 0 <= offset < self.count:
            raise IndexError(f"Offset {offset} is out of range for an array of {self.count} elements.")
        result = []
        for extent in self._shape:
            offset, i = divmod(offset, extent)
            result.append(i)
        return tuple(result)

    def _resolve(self, key: int | Sequence[int]) -> int:
        offset = self.flatten_index(*key) if isinstance(key, Sequence) else int(key)
        # Negative offsets would otherwise wrap around in numpy.
        if not 0 <= offset < self.count:
            raise IndexError(f"Index {key!r} is out of range for array with shape {self._shape}.")
        return offset

    def __getitem__(self, key: int | Sequence[int]) -> int | float:
        return self._data[self._resolve(key)].item()

    def __setitem__(self, key: int | Sequence[int], value: int | float) -> None:
        self._data[self._resolve(key)] = value

    def __len__(self) -> int:
        return self.count

    def get_element_string(self, *index: int) -> str | None:
        """Return the string form of an element, or `None` if the index is
        out of range.

        A single index is interpreted as the first axis index, exactly as in
        `flatten_index`.
        """
        offset = self.flatten_index(*index)
        if 0 <= offset < self.count:
            return str(self._data[offset].item())
        return None

    def to_numpy(self) -> np.ndarray:
        """Return a read-only view of the array with numpy axis ordering.

        The returned array has shape ``shape[::-1]``, so the last numpy axis
        is FITS axis 0 and a 2-d array is indexed as ``[y, x]``.
        """
        view = self._data.view()
        view.flags.writeable = False
        if not self._shape:
            return view
        return view.reshape(self._shape[::-1])

    def __eq__(self, other: object) -> bool:
        if type(other) is not DataArray:
            return NotImplemented
        return (
            self._shape == other._shape
            and self._number_type == other._number_type
            and bool(np.array_equal(self._data, other._data))
        )

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return f"DataArray({'x'.join(str(n) for n in self._shape) or '0'}, {self._number_type})"

    def __repr__(self) -> str:
        return f"DataArray({list(self._shape)!r}, {self._number_type!r})"
