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

__all__ = ("ArgumentError", "FormatError", "UnsupportedTypeError")


class FormatError(RuntimeError):
    """The error type raised when a byte stream is not a structurally valid
    FITS file.

    This is always fatal to the decode in progress.
    """


class ArgumentError(ValueError):
    """The error type raised when a header-data unit cannot be used for the
    requested operation (e.g. it is not an image).
    """


class UnsupportedTypeError(TypeError):
    """The error type raised when an operation does not support the element
    type of an array.
    """
