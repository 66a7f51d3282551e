from __future__ import annotations

import datetime
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Tuple, Union

ValueRange = Tuple[float, float]


class ShapeType(IntEnum):
    NULL = 0
    POINT = 1
    POLYLINE = 3
    POLYGON = 5
    MULTIPOINT = 8
    POINTZ = 11
    POLYLINEZ = 13
    POLYGONZ = 15
    MULTIPOINTZ = 18
    POINTM = 21
    POLYLINEM = 23
    POLYGONM = 25
    MULTIPOINTM = 28
    MULTIPATCH = 31


class PartType(IntEnum):
    TRIANGLE_STRIP = 0
    TRIANGLE_FAN = 1
    OUTER_RING = 2
    INNER_RING = 3
    FIRST_RING = 4
    RING = 5


@dataclass(frozen=True)
class BoundingBox:
    x_min: float
    y_min: float
    x_max: float
    y_max: float

    ZERO: ClassVar["BoundingBox"]

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x_min, self.y_min, self.x_max, self.y_max)

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.x_min + self.x_max) / 2.0, (self.y_min + self.y_max) / 2.0)


BoundingBox.ZERO = BoundingBox(0.0, 0.0, 0.0, 0.0)


class Partable:
    """Mixin for kinds that store a flat point list split by part-start indices."""

    points: Tuple["Point", ...]
    parts: Tuple[int, ...]

    @property
    def points_by_parts(self) -> List[Tuple["Point", ...]]:
        if len(self.parts) <= 1:
            return [self.points]
        groups: List[Tuple[Point, ...]] = []
        start = 0
        for end in self.parts[1:]:
            groups.append(self.points[start:end])
            start = end
        groups.append(self.points[start:])
        return groups


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    shape_type: ClassVar[ShapeType] = ShapeType.POINT


@dataclass(frozen=True)
class PolyLine(Partable):
    """One or more parts, each a connected sequence of two or more points."""

    bbox: BoundingBox
    parts: Tuple[int, ...]
    points: Tuple[Point, ...]

    shape_type: ClassVar[ShapeType] = ShapeType.POLYLINE


@dataclass(frozen=True)
class Polygon(Partable):
    """One or more closed rings; clockwise rings are outer, counterclockwise are holes."""

    bbox: BoundingBox
    parts: Tuple[int, ...]
    points: Tuple[Point, ...]

    shape_type: ClassVar[ShapeType] = ShapeType.POLYGON


@dataclass(frozen=True)
class MultiPoint:
    bbox: BoundingBox
    points: Tuple[Point, ...]

    shape_type: ClassVar[ShapeType] = ShapeType.MULTIPOINT


@dataclass(frozen=True)
class PointZ:
    x: float
    y: float
    z: float
    m: Optional[float]

    shape_type: ClassVar[ShapeType] = ShapeType.POINTZ


@dataclass(frozen=True)
class PolyLineZ(Partable):
    bbox: BoundingBox
    parts: Tuple[int, ...]
    points: Tuple[Point, ...]
    z_range: ValueRange
    z_values: Tuple[float, ...]
    m_range: Optional[ValueRange]
    m_values: Optional[Tuple[Optional[float], ...]]

    shape_type: ClassVar[ShapeType] = ShapeType.POLYLINEZ


@dataclass(frozen=True)
class PolygonZ(Partable):
    bbox: BoundingBox
    parts: Tuple[int, ...]
    points: Tuple[Point, ...]
    z_range: ValueRange
    z_values: Tuple[float, ...]
    m_range: Optional[ValueRange]
    m_values: Optional[Tuple[Optional[float], ...]]

    shape_type: ClassVar[ShapeType] = ShapeType.POLYGONZ


@dataclass(frozen=True)
class MultiPointZ:
    bbox: BoundingBox
    points: Tuple[Point, ...]
    z_range: ValueRange
    z_values: Tuple[float, ...]
    m_range: Optional[ValueRange]
    m_values: Optional[Tuple[Optional[float], ...]]

    shape_type: ClassVar[ShapeType] = ShapeType.MULTIPOINTZ


@dataclass(frozen=True)
class PointM:
    x: float
    y: float
    m: float

    shape_type: ClassVar[ShapeType] = ShapeType.POINTM


@dataclass(frozen=True)
class PolyLineM(Partable):
    bbox: BoundingBox
    parts: Tuple[int, ...]
    points: Tuple[Point, ...]
    m_range: Optional[ValueRange]
    m_values: Optional[Tuple[Optional[float], ...]]

    shape_type: ClassVar[ShapeType] = ShapeType.POLYLINEM


@dataclass(frozen=True)
class PolygonM(Partable):
    bbox: BoundingBox
    parts: Tuple[int, ...]
    points: Tuple[Point, ...]
    m_range: Optional[ValueRange]
    m_values: Optional[Tuple[Optional[float], ...]]

    shape_type: ClassVar[ShapeType] = ShapeType.POLYGONM


@dataclass(frozen=True)
class MultiPointM:
    bbox: BoundingBox
    points: Tuple[Point, ...]
    m_range: Optional[ValueRange]
    m_values: Optional[Tuple[Optional[float], ...]]

    shape_type: ClassVar[ShapeType] = ShapeType.MULTIPOINTM


@dataclass(frozen=True)
class MultiPatch(Partable):
    """Surface patches; ``part_types`` says how each part's vertices are read."""

    bbox: BoundingBox
    parts: Tuple[int, ...]
    part_types: Tuple[PartType, ...]
    points: Tuple[Point, ...]
    z_range: ValueRange
    z_values: Tuple[float, ...]
    m_range: Optional[ValueRange]
    m_values: Optional[Tuple[Optional[float], ...]]

    shape_type: ClassVar[ShapeType] = ShapeType.MULTIPATCH


Shape = Union[
    Point,
    PolyLine,
    Polygon,
    MultiPoint,
    PointZ,
    PolyLineZ,
    PolygonZ,
    MultiPointZ,
    PointM,
    PolyLineM,
    PolygonM,
    MultiPointM,
    MultiPatch,
]

PropertyValue = Union[str, datetime.date, int, float, bool]


@dataclass(frozen=True)
class InfoProperty:
    name: str
    value: PropertyValue


@dataclass(frozen=True)
class InfoRecord:
    """
    Ordered attribute values of one table row.  A field whose text could not
    be parsed is left out entirely, so ``get`` returning ``None`` means "no
    value" whether the column is unknown or the cell was unreadable.
    """

    properties: Tuple[InfoProperty, ...]

    def get(self, name: str, default: Any = None) -> Any:
        for prop in self.properties:
            if prop.name == name:
                return prop.value
        return default

    def __contains__(self, name: object) -> bool:
        return any(prop.name == name for prop in self.properties)

    def __iter__(self) -> Iterator[InfoProperty]:
        return iter(self.properties)

    def __len__(self) -> int:
        return len(self.properties)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(prop.name for prop in self.properties)

    def as_dict(self) -> Dict[str, PropertyValue]:
        return {prop.name: prop.value for prop in self.properties}


@dataclass(frozen=True)
class Shapefile:
    bounding_box: BoundingBox
    z_range: Optional[ValueRange]
    m_range: Optional[ValueRange]
    shapes: Tuple[Optional[Shape], ...]
    records: Tuple[InfoRecord, ...]

    @property
    def shapes_and_records(self) -> List[Tuple[Optional[Shape], InfoRecord]]:
        return list(zip(self.shapes, self.records))


@dataclass(frozen=True)
class ShapefilePath:
    shp: Path
    dbf: Path
    shx: Path

    @classmethod
    def from_base(cls, base: str | Path) -> "ShapefilePath":
        """Build the triplet for ``<base>.shp``, ``<base>.dbf`` and ``<base>.shx``."""

        base = Path(base)
        if base.suffix.lower() in (".shp", ".dbf", ".shx"):
            base = base.with_suffix("")
        return cls(
            shp=Path(f"{base}.shp"),
            dbf=Path(f"{base}.dbf"),
            shx=Path(f"{base}.shx"),
        )
