"""
Reader for the .shp geometry stream.

Every record is an 8-byte big-endian header (record number, content length
in 16-bit words) followed by a little-endian shape-type code and the payload
for that kind.  The offset of the following record is derived from the
header alone, so a caller can step over a record whose payload cannot be
decoded.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from .entities import (
    BoundingBox,
    MultiPatch,
    MultiPoint,
    MultiPointM,
    MultiPointZ,
    PartType,
    Point,
    PointM,
    PointZ,
    PolyLine,
    PolyLineM,
    PolyLineZ,
    Polygon,
    PolygonM,
    PolygonZ,
    Shape,
    ShapeType,
    ValueRange,
)
from .errors import ShapeKindMismatch, StructuralMismatch, UnsupportedGeometryKind, UnsupportedPartType
from .geometry import measure_or_none
from .header import HEADER_SIZE, WORD_SIZE, measure_length, read_main_header
from .unpack import parse_layout, unpack

logger = logging.getLogger(__name__)

RECORD_HEADER_SIZE = 8
RECORD_HEADER_LAYOUT = parse_layout(">2i")
DOUBLE_SIZE = 8

MeasureBlock = Tuple[Optional[ValueRange], Optional[Tuple[Optional[float], ...]]]


class _RecordCursor:
    """Sequential reads over one record's content bytes."""

    def __init__(self, content: bytes) -> None:
        self._content = content
        self._pos = 0

    @property
    def remaining(self) -> int:
        return len(self._content) - self._pos

    def take(self, layout: str) -> tuple:
        parsed = parse_layout(layout)
        size = parsed.size
        chunk = self._content[self._pos : self._pos + size]
        self._pos += size
        return unpack(chunk, parsed)


class ShpReader:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._handle = self.path.open("rb")
        try:
            self.header = read_main_header(self._handle)
            try:
                self.shape_type = ShapeType(self.header.shape_type_code)
            except ValueError:
                raise UnsupportedGeometryKind(self.header.shape_type_code, offset=32) from None
            self.file_length = measure_length(self._handle)
        except BaseException:
            self._handle.close()
            raise
        if self.file_length != self.header.declared_length:
            logger.warning(
                f"{self.path.name}: header declares {self.header.declared_length} bytes, "
                f"file holds {self.file_length}; using the measured length"
            )
        self._payload_readers: Dict[ShapeType, Callable[[_RecordCursor], Shape]] = {
            ShapeType.POINT: self._read_point,
            ShapeType.POLYLINE: self._read_polyline,
            ShapeType.POLYGON: self._read_polygon,
            ShapeType.MULTIPOINT: self._read_multipoint,
            ShapeType.POINTZ: self._read_point_z,
            ShapeType.POLYLINEZ: self._read_polyline_z,
            ShapeType.POLYGONZ: self._read_polygon_z,
            ShapeType.MULTIPOINTZ: self._read_multipoint_z,
            ShapeType.POINTM: self._read_point_m,
            ShapeType.POLYLINEM: self._read_polyline_m,
            ShapeType.POLYGONM: self._read_polygon_m,
            ShapeType.MULTIPOINTM: self._read_multipoint_m,
            ShapeType.MULTIPATCH: self._read_multipatch,
        }

    def __enter__(self) -> "ShpReader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._handle.close()

    @property
    def bounding_box(self) -> BoundingBox:
        return self.header.bounding_box

    @property
    def z_range(self) -> Optional[ValueRange]:
        return self.header.z_range

    @property
    def m_range(self) -> Optional[ValueRange]:
        return self.header.m_range

    @property
    def declared_length(self) -> int:
        return self.header.declared_length

    def read_shapes(self) -> List[Optional[Shape]]:
        return list(self.iter_shapes())

    def iter_shapes(self) -> Iterator[Optional[Shape]]:
        offset = HEADER_SIZE
        while True:
            result = self.read_shape_at(offset)
            if result is None:
                return
            shape, offset = result
            yield shape

    def read_shape_at(self, offset: int) -> Optional[Tuple[Optional[Shape], int]]:
        """
        Decode the record starting at ``offset``.

        Returns ``(shape, next_offset)`` where ``shape`` is ``None`` for a null
        record, or ``None`` when ``offset`` is already the end of the stream.
        """

        if offset == self.file_length:
            return None

        self._handle.seek(offset)
        _record_number, content_words = unpack(self._handle.read(RECORD_HEADER_SIZE), RECORD_HEADER_LAYOUT)
        if content_words < 0:
            raise StructuralMismatch(f"record at offset {offset} declares a negative content length")
        next_offset = offset + RECORD_HEADER_SIZE + content_words * WORD_SIZE

        cursor = _RecordCursor(self._handle.read(content_words * WORD_SIZE))
        (code,) = cursor.take("<i")
        try:
            kind = ShapeType(code)
        except ValueError:
            raise UnsupportedGeometryKind(code, offset=offset, next_offset=next_offset) from None

        if kind is ShapeType.NULL:
            return None, next_offset
        if kind is not self.shape_type:
            raise ShapeKindMismatch(
                f"record at offset {offset} is {kind.name} but {self.path.name} declares {self.shape_type.name}"
            )

        try:
            shape = self._payload_readers[kind](cursor)
        except UnsupportedPartType as exc:
            exc.offset = offset
            exc.next_offset = next_offset
            raise
        return shape, next_offset

    # Payload readers

    def _read_point(self, cursor: _RecordCursor) -> Point:
        x, y = cursor.take("<2d")
        return Point(x, y)

    def _read_polyline(self, cursor: _RecordCursor) -> PolyLine:
        bbox, parts, points = self._read_parts_and_points(cursor)
        return PolyLine(bbox=bbox, parts=parts, points=points)

    def _read_polygon(self, cursor: _RecordCursor) -> Polygon:
        bbox, parts, points = self._read_parts_and_points(cursor)
        return Polygon(bbox=bbox, parts=parts, points=points)

    def _read_multipoint(self, cursor: _RecordCursor) -> MultiPoint:
        bbox = self._read_bbox(cursor)
        (count,) = cursor.take("<i")
        return MultiPoint(bbox=bbox, points=self._read_points(cursor, count))

    def _read_point_z(self, cursor: _RecordCursor) -> PointZ:
        x, y, z = cursor.take("<3d")
        m = None
        if cursor.remaining >= DOUBLE_SIZE:
            (raw_m,) = cursor.take("<d")
            m = measure_or_none(raw_m)
        return PointZ(x, y, z, m)

    def _read_polyline_z(self, cursor: _RecordCursor) -> PolyLineZ:
        bbox, parts, points = self._read_parts_and_points(cursor)
        z_range, z_values = self._read_z_block(cursor, len(points))
        m_range, m_values = self._read_m_block(cursor, len(points))
        return PolyLineZ(bbox, parts, points, z_range, z_values, m_range, m_values)

    def _read_polygon_z(self, cursor: _RecordCursor) -> PolygonZ:
        bbox, parts, points = self._read_parts_and_points(cursor)
        z_range, z_values = self._read_z_block(cursor, len(points))
        m_range, m_values = self._read_m_block(cursor, len(points))
        return PolygonZ(bbox, parts, points, z_range, z_values, m_range, m_values)

    def _read_multipoint_z(self, cursor: _RecordCursor) -> MultiPointZ:
        bbox = self._read_bbox(cursor)
        (count,) = cursor.take("<i")
        points = self._read_points(cursor, count)
        z_range, z_values = self._read_z_block(cursor, count)
        m_range, m_values = self._read_m_block(cursor, count)
        return MultiPointZ(bbox, points, z_range, z_values, m_range, m_values)

    def _read_point_m(self, cursor: _RecordCursor) -> PointM:
        x, y, m = cursor.take("<3d")
        return PointM(x, y, m)

    def _read_polyline_m(self, cursor: _RecordCursor) -> PolyLineM:
        bbox, parts, points = self._read_parts_and_points(cursor)
        m_range, m_values = self._read_m_block(cursor, len(points))
        return PolyLineM(bbox, parts, points, m_range, m_values)

    def _read_polygon_m(self, cursor: _RecordCursor) -> PolygonM:
        bbox, parts, points = self._read_parts_and_points(cursor)
        m_range, m_values = self._read_m_block(cursor, len(points))
        return PolygonM(bbox, parts, points, m_range, m_values)

    def _read_multipoint_m(self, cursor: _RecordCursor) -> MultiPointM:
        bbox = self._read_bbox(cursor)
        (count,) = cursor.take("<i")
        points = self._read_points(cursor, count)
        m_range, m_values = self._read_m_block(cursor, count)
        return MultiPointM(bbox, points, m_range, m_values)

    def _read_multipatch(self, cursor: _RecordCursor) -> MultiPatch:
        bbox = self._read_bbox(cursor)
        part_count, point_count = cursor.take("<2i")
        parts = self._read_ints(cursor, part_count)
        part_types = []
        for code in self._read_ints(cursor, part_count):
            try:
                part_types.append(PartType(code))
            except ValueError:
                raise UnsupportedPartType(code) from None
        points = self._read_points(cursor, point_count)
        z_range, z_values = self._read_z_block(cursor, point_count)
        m_range, m_values = self._read_m_block(cursor, point_count)
        return MultiPatch(bbox, parts, tuple(part_types), points, z_range, z_values, m_range, m_values)

    # Shared pieces

    def _read_bbox(self, cursor: _RecordCursor) -> BoundingBox:
        return BoundingBox(*cursor.take("<4d"))

    def _read_parts_and_points(
        self, cursor: _RecordCursor
    ) -> Tuple[BoundingBox, Tuple[int, ...], Tuple[Point, ...]]:
        bbox = self._read_bbox(cursor)
        part_count, point_count = cursor.take("<2i")
        parts = self._read_ints(cursor, part_count)
        points = self._read_points(cursor, point_count)
        return bbox, parts, points

    def _read_ints(self, cursor: _RecordCursor, count: int) -> Tuple[int, ...]:
        if count <= 0:
            return ()
        return cursor.take(f"<{count}i")

    def _read_doubles(self, cursor: _RecordCursor, count: int) -> Tuple[float, ...]:
        if count <= 0:
            return ()
        return cursor.take(f"<{count}d")

    def _read_points(self, cursor: _RecordCursor, count: int) -> Tuple[Point, ...]:
        coords = self._read_doubles(cursor, count * 2)
        return tuple(Point(coords[idx], coords[idx + 1]) for idx in range(0, len(coords), 2))

    def _read_z_block(self, cursor: _RecordCursor, count: int) -> Tuple[ValueRange, Tuple[float, ...]]:
        if count <= 0:
            return (0.0, 0.0), ()
        z_min, z_max = cursor.take("<2d")
        return (z_min, z_max), self._read_doubles(cursor, count)

    def _read_m_block(self, cursor: _RecordCursor, count: int) -> MeasureBlock:
        # The M block is optional even when the header declares an M range.
        if self.m_range is None or count <= 0:
            return None, None
        if cursor.remaining < DOUBLE_SIZE * (2 + count):
            return None, None
        m_min, m_max = cursor.take("<2d")
        values = tuple(measure_or_none(value) for value in self._read_doubles(cursor, count))
        return (m_min, m_max), values
