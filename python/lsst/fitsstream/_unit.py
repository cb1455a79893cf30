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

__all__ = ("DataUnitType", "HeaderDataUnit", "primary_data_unit")

import enum
from collections.abc import Iterable, Sequence
from typing import final

from ._array import DataArray
from ._header import Header


class DataUnitType(enum.StrEnum):
    """Classification of a header-data unit."""

    UNKNOWN = "Unknown"
    PRIMARY = "Primary"
    IMAGE = "Image"
    TABLE = "Table"
    BINARY_TABLE = "BinaryTable"

    @classmethod
    def from_xtension(cls, xtension: str | None) -> DataUnitType:
        """Classify an extension from its unquoted ``XTENSION`` value."""
        match xtension:
            case "IMAGE":
                return cls.IMAGE
            case "TABLE":
                return cls.TABLE
            case "BINTABLE":
                return cls.BINARY_TABLE
        return cls.UNKNOWN


@final
class HeaderDataUnit:
    """A single header and the data arrays that follow it.

    Parameters
    ----------
    header
        Parsed header, not including the ``END`` card.
    type
        Classification of the unit.
    groups
        Data arrays ("groups"), all with the same shape.  Most units have
        zero or one group; more are present only when ``GCOUNT > 1``.
    """

    def __init__(self, header: Header, type: DataUnitType, groups: Sequence[DataArray] = ()):
        self._header = header
        self._type = type
        self._groups = tuple(groups)
        if len({g.shape for g in self._groups}) > 1:
            raise ValueError("All groups in a header-data unit must have the same shape.")

    @property
    def header(self) -> Header:
        """Header keywords and values."""
        return self._header

    @property
    def type(self) -> DataUnitType:
        """Classification of the unit."""
        return self._type

    @property
    def groups(self) -> tuple[DataArray, ...]:
        """Data arrays in this unit."""
        return self._groups

    @property
    def name(self) -> str | None:
        """The unquoted ``EXTNAME`` of the unit, or `None`."""
        return self._header.get_str("EXTNAME")

    @property
    def shape(self) -> tuple[int, ...]:
        """The shared shape of all groups, or an empty tuple if there are
        none.
        """
        return self._groups[0].shape if self._groups else ()

    def __str__(self) -> str:
        shape = "x".join(str(n) for n in self.shape) or "0"
        return f"{self.name or 'null'} | {self.type} | {len(self._groups)} groups of {shape}"

    def __repr__(self) -> str:
        return f"HeaderDataUnit(..., type={self._type!r}, groups={self._groups!r})"


def primary_data_unit(units: Iterable[HeaderDataUnit]) -> HeaderDataUnit | None:
    """Return the first (primary) unit of a sequence, or `None` if it is
    empty.

    Only the first unit is pulled from a lazy sequence.
    """
    return next(iter(units), None)
