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

"""A streaming reader for FITS files, with simple raster export of images.

`decode` turns a binary stream into a lazy iterator of `HeaderDataUnit`
objects, each holding a `Header` and zero or more `DataArray` groups.
`FitsImage` extracts a 2-d integer image from a unit so it can be written
with `write_bmp` or `write_tga`.
"""

from ._array import *
from ._deserializer import *
from ._dtypes import *
from ._errors import *
from ._header import *
from ._image import *
from ._options import *
from ._raster import *
from ._unit import *
