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

__all__ = ("BLOCK_SIZE", "FitsDeserializer", "decode", "decode_file")

from collections.abc import Iterator
from logging import getLogger
from typing import IO

from lsst.resources import ResourcePath, ResourcePathExpression

from ._array import DataArray
from ._dtypes import NumberType
from ._errors import FormatError
from ._header import CARD_SIZE, END_KEYWORD, Header, HeaderValue, parse_card
from ._unit import DataUnitType, HeaderDataUnit

_LOG = getLogger(__name__)

BLOCK_SIZE = 2880
"""Size of a FITS logical record in bytes; headers and data units are padded
to a multiple of this.
"""

_PRIMARY_KEYWORD = "SIMPLE"


class FitsDeserializer:
    """A reader that turns a FITS byte stream into `HeaderDataUnit` objects.

    Parameters
    ----------
    block_size, optional
        Alignment of headers and data units in bytes.  Only test code should
        ever need to change this from the FITS standard's 2880.

    Notes
    -----
    Units are decoded lazily: nothing past the end of a unit is read until
    the next unit is requested.  All data arrays are read into memory, but
    heap regions (``PCOUNT``) are read and discarded.
    """

    def __init__(self, *, block_size: int = BLOCK_SIZE):
        if block_size <= 0 or block_size % CARD_SIZE:
            raise ValueError(f"Block size must be a positive multiple of {CARD_SIZE}; got {block_size}.")
        self._block_size = block_size

    @property
    def block_size(self) -> int:
        """Alignment of headers and data units in bytes."""
        return self._block_size

    def decode(self, stream: IO[bytes]) -> Iterator[HeaderDataUnit]:
        """Iterate over the header-data units in a stream.

        Parameters
        ----------
        stream
            Readable binary stream, positioned at the start of the primary
            header.

        Returns
        -------
        `~collections.abc.Iterator` [`HeaderDataUnit`]
            Lazy iterator over units; the first is always the primary unit.

        Raises
        ------
        FormatError
            Raised (on iteration) if the stream is empty, does not start with
            a ``SIMPLE`` card, has an unsupported ``BITPIX``, or ends in the
            middle of a unit.  Units already yielded remain valid.
        """
        primary = self._read_unit(stream, is_primary=True)
        if primary is None:
            raise FormatError("File is missing a primary header data unit or is not a FITS file.")
        yield primary
        while (unit := self._read_unit(stream, is_primary=False)) is not None:
            yield unit

    def decode_file(self, path: ResourcePathExpression) -> list[HeaderDataUnit]:
        """Read all header-data units from a file.

        Parameters
        ----------
        path
            File to read; convertible to `lsst.resources.ResourcePath`.

        Returns
        -------
        `list` [`HeaderDataUnit`]
            All units in the file.  The file is closed before this returns or
            raises.
        """
        path = ResourcePath(path)
        with path.open("rb") as stream:
            return list(self.decode(stream))

    def _padding(self, size: int) -> int:
        return -size % self._block_size

    def _read_unit(self, stream: IO[bytes], is_primary: bool) -> HeaderDataUnit | None:
        card = _read(stream, CARD_SIZE, allow_eof=True)
        if not card:
            return None
        cards: list[tuple[str, HeaderValue]] = []
        header_size = 0
        while True:
            keyword, value = parse_card(card)
            if is_primary and header_size == 0 and keyword != _PRIMARY_KEYWORD:
                raise FormatError(
                    "Source is not a valid FITS file.  The primary data unit of a FITS file must begin "
                    f"with the {_PRIMARY_KEYWORD} keyword; got {keyword!r}."
                )
            header_size += CARD_SIZE
            if keyword == END_KEYWORD:
                break
            cards.append((keyword, value))
            card = _read(stream, CARD_SIZE)
        _skip(stream, self._padding(header_size))
        header = Header(cards)

        if is_primary:
            unit_type = DataUnitType.PRIMARY
        else:
            unit_type = DataUnitType.from_xtension(header.get_str("XTENSION"))

        groups = self._read_groups(stream, header, unit_type)
        unit = HeaderDataUnit(header, unit_type, groups)
        _LOG.debug("Decoded header-data unit %s.", unit)
        return unit

    def _read_groups(self, stream: IO[bytes], header: Header, unit_type: DataUnitType) -> list[DataArray]:
        number_type = NumberType.from_bitpix(header.get_int("BITPIX", NumberType.uint8.bitpix))
        width = number_type.byte_width
        naxis = header.get_int("NAXIS", 0)
        pcount = header.get_int("PCOUNT", 0)
        gcount = header.get_int("GCOUNT", 1)
        if naxis <= 0:
            return []
        # FITS axes are 1-indexed.
        shape = [header.get_int(f"NAXIS{i + 1}", 0) for i in range(naxis)]
        if any(n < 0 for n in shape) or pcount < 0 or gcount < 0:
            raise FormatError(f"Negative NAXISn, PCOUNT or GCOUNT in header (shape={shape}).")
        if unit_type is DataUnitType.BINARY_TABLE:
            # NAXIS1 is the row width in bytes, not elements.
            shape[0] = (shape[0] + width - 1) // width
        heap_size = pcount * width
        groups = []
        for _ in range(gcount):
            size = width
            for n in shape:
                size *= n
            group = DataArray.from_buffer(shape, number_type, _read(stream, size))
            _skip(stream, heap_size)
            _skip(stream, self._padding(heap_size + group.nbytes))
            groups.append(group)
        return groups


def _read(stream: IO[bytes], size: int, allow_eof: bool = False) -> bytes:
    """Read exactly ``size`` bytes, raising `FormatError` on a short read.

    If ``allow_eof`` is `True`, an empty result is returned when the stream
    is already exhausted.
    """
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            if allow_eof and remaining == size:
                return b""
            raise FormatError(f"Unexpected end of stream; expected {remaining} more bytes.")
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def _skip(stream: IO[bytes], size: int) -> None:
    while size > 0:
        n = min(size, BLOCK_SIZE)
        _read(stream, n)
        size -= n


_DEFAULT = FitsDeserializer()


def decode(stream: IO[bytes]) -> Iterator[HeaderDataUnit]:
    """Iterate over the header-data units in a stream.

    See `FitsDeserializer.decode`.
    """
    return _DEFAULT.decode(stream)


def decode_file(path: ResourcePathExpression) -> list[HeaderDataUnit]:
    """Read all header-data units from a file.

    See `FitsDeserializer.decode_file`.
    """
    return _DEFAULT.decode_file(path)
