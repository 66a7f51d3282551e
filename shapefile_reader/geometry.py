from __future__ import annotations

from typing import List, Optional, Tuple

from .entities import BoundingBox, MultiPoint, MultiPointM, MultiPointZ, Partable, Point, PointM, PointZ, Shape

MEASURE_NO_DATA = -1e38


def measure_or_none(value: float) -> Optional[float]:
    """Measures below the no-data threshold mean "no measure recorded"."""

    return None if value < MEASURE_NO_DATA else value


def range_or_none(low: float, high: float) -> Optional[Tuple[float, float]]:
    if low > high:
        return None
    return (low, high)


def points_grouped_by_parts(shape: Optional[Shape]) -> Optional[List[Tuple[Point, ...]]]:
    """Return the per-part point groups, or ``None`` for kinds without parts."""

    if isinstance(shape, Partable):
        return shape.points_by_parts
    return None


def bounding_box_of(shape: Optional[Shape]) -> Optional[BoundingBox]:
    if shape is None or isinstance(shape, (Point, PointZ, PointM)):
        return None
    return shape.bbox


def shape_points(shape: Optional[Shape]) -> List[Tuple[float, float]]:
    """Flatten any shape into its (x, y) vertices."""

    if shape is None:
        return []
    if isinstance(shape, (Point, PointZ, PointM)):
        return [(shape.x, shape.y)]
    return [(pt.x, pt.y) for pt in shape.points]


def is_point_collection(shape: Optional[Shape]) -> bool:
    return isinstance(shape, (MultiPoint, MultiPointZ, MultiPointM))
