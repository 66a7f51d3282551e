from __future__ import annotations

import logging
from contextlib import ExitStack
from pathlib import Path
from typing import Optional, Tuple, Union

from .dbf import DbfReader
from .entities import InfoRecord, Shape, Shapefile, ShapefilePath
from .errors import RecordCountMismatch
from .shp import ShpReader
from .shx import ShxReader

logger = logging.getLogger(__name__)

PathLike = Union[ShapefilePath, str, Path]


def _as_triplet(path: PathLike) -> ShapefilePath:
    if isinstance(path, ShapefilePath):
        return path
    return ShapefilePath.from_base(path)


class ShapefileReader:
    """Open handle over a .shp/.dbf/.shx triplet; use as a context manager."""

    def __init__(self, path: PathLike) -> None:
        self.path = _as_triplet(path)
        with ExitStack() as stack:
            self.shp = stack.enter_context(ShpReader(self.path.shp))
            self.dbf = stack.enter_context(DbfReader(self.path.dbf))
            self.shx = stack.enter_context(ShxReader(self.path.shx))
            self._resources = stack.pop_all()

    def __enter__(self) -> "ShapefileReader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._resources.close()

    def read_all(self) -> Shapefile:
        shapes = self.shp.read_shapes()
        records = self.dbf.read_records()
        if len(shapes) != len(records):
            raise RecordCountMismatch(len(shapes), len(records))
        logger.debug(f"{self.path.shp.name}: decoded {len(shapes)} shape(s) with attributes")
        return Shapefile(
            bounding_box=self.shp.bounding_box,
            z_range=self.shp.z_range,
            m_range=self.shp.m_range,
            shapes=tuple(shapes),
            records=tuple(records),
        )

    def read_one(self, ordinal: int) -> Tuple[Optional[Shape], InfoRecord]:
        offset = self.shx.offset_of(ordinal)
        result = self.shp.read_shape_at(offset)
        shape = result[0] if result is not None else None
        record = self.dbf.read_record_at(self.dbf.record_offset(ordinal))
        return shape, record


def open_shapefile(path: PathLike) -> ShapefileReader:
    return ShapefileReader(path)


def read_all(path: PathLike) -> Shapefile:
    with open_shapefile(path) as reader:
        return reader.read_all()


def read_one(path: PathLike, ordinal: int) -> Tuple[Optional[Shape], InfoRecord]:
    with open_shapefile(path) as reader:
        return reader.read_one(ordinal)
