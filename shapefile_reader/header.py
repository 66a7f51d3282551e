"""
The 100-byte prologue shared by .shp and .shx files.

    offset  size  order   field
         0     4  big     file code (9994)
         4    20  big     unused
        24     4  big     file length in 16-bit words
        28     4  little  version (1000)
        32     4  little  shape type
        36    32  little  bounding box (xmin, ymin, xmax, ymax)
        68    32  little  zmin, zmax, mmin, mmax
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import BinaryIO, Optional

from .entities import BoundingBox, ValueRange
from .geometry import range_or_none
from .unpack import unpack

HEADER_SIZE = 100
FILE_CODE = 9994
WORD_SIZE = 2

BIG_ENDIAN_PART = ">7i"
LITTLE_ENDIAN_PART = "<2i8d"


@dataclass(frozen=True)
class MainHeader:
    file_code: int
    declared_length: int
    version: int
    shape_type_code: int
    bounding_box: BoundingBox
    z_range: Optional[ValueRange]
    m_range: Optional[ValueRange]


def read_main_header(handle: BinaryIO) -> MainHeader:
    handle.seek(0)
    big = unpack(handle.read(28), BIG_ENDIAN_PART)
    little = unpack(handle.read(72), LITTLE_ENDIAN_PART)
    file_code, length_words = big[0], big[6]
    version, shape_type_code = little[0], little[1]
    x_min, y_min, x_max, y_max, z_min, z_max, m_min, m_max = little[2:]
    return MainHeader(
        file_code=file_code,
        declared_length=length_words * WORD_SIZE,
        version=version,
        shape_type_code=shape_type_code,
        bounding_box=BoundingBox(x_min, y_min, x_max, y_max),
        z_range=range_or_none(z_min, z_max),
        m_range=range_or_none(m_min, m_max),
    )


def measure_length(handle: BinaryIO) -> int:
    """Seek to end-of-stream and report its offset; declared lengths are not trusted."""

    handle.seek(0, os.SEEK_END)
    return handle.tell()
