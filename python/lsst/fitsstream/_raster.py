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

"""Writers for simple uncompressed raster formats.

Both writers emit 24-bit ``(B, G, R)`` pixels computed by mapping each pixel
of a `FitsImage` through its colour ramp; the alpha channel is dropped.
"""

from __future__ import annotations

__all__ = ("BMP_HEADER_SIZE", "TGA_HEADER_SIZE", "RasterFormat", "encode", "write_bmp", "write_tga")

import enum
import struct
from typing import IO, TYPE_CHECKING

import numpy as np

from lsst.resources import ResourcePath, ResourcePathExpression

if TYPE_CHECKING:
    from ._image import FitsImage

BMP_HEADER_SIZE = 54
"""Combined size of the BMP file header and ``BITMAPINFOHEADER``."""

TGA_HEADER_SIZE = 18
"""Size of the TGA file header."""

# Signature, file size, two reserved fields, pixel data offset.
_BMP_FILE_HEADER = struct.Struct("<2sIHHI")
# Header size, width, height, planes, bits per pixel, compression, image
# size, x and y pixels per meter, colours used, important colours.
_BMP_INFO_HEADER = struct.Struct("<IiiHHIIiiII")
# ID length, colour map type, image type, colour map (first entry,
# length, entry size), x and y origin, width, height, pixel depth, image
# descriptor.
_TGA_HEADER = struct.Struct("<BBBHHBHHHHBB")

_TGA_TRUE_COLOUR = 2
_TGA_TOP_LEFT_ORIGIN = 0x20


class RasterFormat(enum.StrEnum):
    """Raster formats that a `FitsImage` can be written as."""

    BMP = "bmp"
    TGA = "tga"


def _bgr_rows(image: FitsImage) -> np.ndarray:
    # RGBA -> BGR, shape (height, width, 3).
    return image.render()[..., 2::-1]


def _write(sink: IO[bytes] | ResourcePathExpression, data: bytes) -> None:
    if not isinstance(sink, ResourcePath) and callable(getattr(sink, "write", None)):
        sink.write(data)  # type: ignore[union-attr]
    else:
        ResourcePath(sink).write(data, overwrite=True)  # type: ignore[arg-type]


def write_bmp(image: FitsImage, sink: IO[bytes] | ResourcePathExpression) -> None:
    """Write an image as an uncompressed 24-bit Windows bitmap.

    Parameters
    ----------
    image
        Image to write.
    sink
        Writeable binary stream, or a file to (over)write; convertible to
        `lsst.resources.ResourcePath`.

    Notes
    -----
    Rows are written bottom-to-top with no color table.  The file size and
    color count header fields are left at zero, and rows are not padded to
    a multiple of four bytes; most readers accept this, but only images
    whose width is a multiple of four are strictly conformant.
    """
    header = _BMP_FILE_HEADER.pack(b"BM", 0, 0, 0, BMP_HEADER_SIZE) + _BMP_INFO_HEADER.pack(
        _BMP_INFO_HEADER.size, image.width, image.height, 1, 24, 0, 0, 0, 0, 0, 0
    )
    body = np.ascontiguousarray(_bgr_rows(image)[::-1]).tobytes()
    _write(sink, header + body)


def write_tga(image: FitsImage, sink: IO[bytes] | ResourcePathExpression) -> None:
    """Write an image as an uncompressed 24-bit Truevision TGA.

    Parameters
    ----------
    image
        Image to write.
    sink
        Writeable binary stream, or a file to (over)write; convertible to
        `lsst.resources.ResourcePath`.

    Notes
    -----
    Rows are written top-to-bottom, with the image descriptor's origin bit
    set accordingly.
    """
    if image.width > 0xFFFF or image.height > 0xFFFF:
        raise ValueError(f"Image of size {image.width}x{image.height} is too large for a TGA file.")
    header = _TGA_HEADER.pack(
        0, 0, _TGA_TRUE_COLOUR, 0, 0, 0, 0, 0, image.width, image.height, 24, _TGA_TOP_LEFT_ORIGIN
    )
    body = np.ascontiguousarray(_bgr_rows(image)).tobytes()
    _write(sink, header + body)


def encode(image: FitsImage, sink: IO[bytes] | ResourcePathExpression, format: RasterFormat | str) -> None:
    """Write an image in the given raster format.

    Parameters
    ----------
    image
        Image to write.
    sink
        Writeable binary stream or file.
    format
        Raster format, as a `RasterFormat` or its string value.
    """
    match RasterFormat(format):
        case RasterFormat.BMP:
            write_bmp(image, sink)
        case RasterFormat.TGA:
            write_tga(image, sink)
