"""Tests for the .shp geometry stream reader using hand-built record bytes."""

import logging
import struct

import pytest

from shapefile_fixtures import (
    SQUARE_BBOX,
    SQUARE_PARTS,
    SQUARE_WITH_HOLE,
    build_shp,
    multipoint_content,
    null_content,
    point_content,
    point_m_content,
    point_z_content,
    poly_content,
)
import shapefile_reader.shp as shp_module
from shapefile_reader import (
    LayoutMismatch,
    MultiPatch,
    MultiPoint,
    MultiPointM,
    MultiPointZ,
    PartType,
    Point,
    PointM,
    PointZ,
    Polygon,
    PolygonM,
    PolygonZ,
    PolyLine,
    PolyLineM,
    PolyLineZ,
    ShapeKindMismatch,
    ShapeType,
    ShpReader,
    UnsupportedGeometryKind,
    UnsupportedPartType,
)

LINE_POINTS = [(0.0, 0.0), (1.0, 1.0), (2.0, 0.0)]
LINE_BBOX = (0.0, 0.0, 2.0, 1.0)


@pytest.fixture
def write_shp(tmp_path):
    def _write(shape_type, contents, **kwargs):
        data, offsets = build_shp(shape_type, contents, **kwargs)
        path = tmp_path / "geometry.shp"
        path.write_bytes(data)
        return path, offsets

    return _write


def test_header_fields(write_shp):
    path, _ = write_shp(5, [], bbox=SQUARE_BBOX, z_range=(1.0, 2.0), m_range=(3.0, -3.0))
    with ShpReader(path) as shp:
        assert shp.shape_type is ShapeType.POLYGON
        assert shp.bounding_box.as_tuple() == SQUARE_BBOX
        assert shp.z_range == (1.0, 2.0)
        assert shp.m_range is None
        assert shp.file_length == 100
        assert shp.read_shapes() == []


def test_polygon_record(write_shp):
    path, _ = write_shp(5, [poly_content(5, SQUARE_BBOX, SQUARE_PARTS, SQUARE_WITH_HOLE)])
    with ShpReader(path) as shp:
        (polygon,) = shp.read_shapes()
    assert isinstance(polygon, Polygon)
    assert polygon.parts == (0, 5)
    assert polygon.points[2] == Point(10.0, 10.0)
    assert [len(ring) for ring in polygon.points_by_parts] == [5, 4]


@pytest.mark.parametrize("declared_length", [100, 140, 5000])
def test_measured_length_overrides_declared_length(write_shp, caplog, declared_length):
    contents = [point_content(float(i), float(i)) for i in range(3)]
    path, _ = write_shp(1, contents, declared_length=declared_length)
    with caplog.at_level(logging.WARNING, logger="shapefile_reader.shp"):
        with ShpReader(path) as shp:
            shapes = shp.read_shapes()
    assert shapes == [Point(0.0, 0.0), Point(1.0, 1.0), Point(2.0, 2.0)]
    assert "using the measured length" in caplog.text


@pytest.mark.parametrize("kind", [kind for kind in ShapeType if kind is not ShapeType.NULL])
def test_null_record_is_absent_shape_for_every_kind(write_shp, kind):
    path, offsets = write_shp(int(kind), [null_content()])
    with ShpReader(path) as shp:
        shape, next_offset = shp.read_shape_at(offsets[0])
        assert shape is None
        assert next_offset == offsets[0] + 8 + 4
        assert shp.read_shape_at(next_offset) is None


def test_read_shape_at_returns_next_offset(write_shp):
    contents = [point_content(1.0, 2.0), null_content(), point_content(3.0, 4.0)]
    path, offsets = write_shp(1, contents)
    with ShpReader(path) as shp:
        assert shp.read_shape_at(offsets[0]) == (Point(1.0, 2.0), offsets[1])
        assert shp.read_shape_at(offsets[1]) == (None, offsets[2])
        assert shp.read_shape_at(offsets[2]) == (Point(3.0, 4.0), shp.file_length)
        assert shp.read_shape_at(shp.file_length) is None


def test_kind_different_from_header_is_fatal(write_shp):
    path, _ = write_shp(5, [point_content(1.0, 1.0)])
    with ShpReader(path) as shp:
        with pytest.raises(ShapeKindMismatch):
            shp.read_shapes()


def test_unknown_kind_reports_where_to_resume(write_shp):
    contents = [struct.pack("<i2d", 7, 0.0, 0.0), point_content(5.0, 6.0)]
    path, offsets = write_shp(1, contents)
    with ShpReader(path) as shp:
        with pytest.raises(UnsupportedGeometryKind) as excinfo:
            shp.read_shape_at(offsets[0])
        assert excinfo.value.code == 7
        assert excinfo.value.next_offset == offsets[1]
        assert shp.read_shape_at(excinfo.value.next_offset)[0] == Point(5.0, 6.0)


def test_unknown_header_kind(write_shp):
    path, _ = write_shp(2, [])
    with pytest.raises(UnsupportedGeometryKind):
        ShpReader(path)


def test_truncated_record_raises_layout_mismatch(tmp_path):
    data, _ = build_shp(1, [point_content(1.0, 2.0)])
    path = tmp_path / "cut.shp"
    path.write_bytes(data[:-4])
    with ShpReader(path) as shp:
        with pytest.raises(LayoutMismatch):
            shp.read_shapes()


@pytest.mark.parametrize(
    "raw_m, expected",
    [
        (-1e39, None),
        (-5e38, None),
        (-1e38, -1e38),
        (0.0, 0.0),
        (42.0, 42.0),
    ],
)
def test_point_z_measure_sentinel(write_shp, raw_m, expected):
    path, _ = write_shp(11, [point_z_content(1.0, 2.0, 3.0, raw_m)])
    with ShpReader(path) as shp:
        (shape,) = shp.read_shapes()
    assert shape == PointZ(1.0, 2.0, 3.0, expected)


def test_point_z_without_measure(write_shp):
    path, _ = write_shp(11, [point_z_content(1.0, 2.0, 3.0)])
    with ShpReader(path) as shp:
        assert shp.read_shapes() == [PointZ(1.0, 2.0, 3.0, None)]


def test_point_m_keeps_literal_measure(write_shp):
    path, _ = write_shp(21, [point_m_content(1.0, 2.0, -1e39)])
    with ShpReader(path) as shp:
        assert shp.read_shapes() == [PointM(1.0, 2.0, -1e39)]


def test_polyline_z_with_measures(write_shp):
    content = poly_content(13, LINE_BBOX, [0], LINE_POINTS, z=[5.0, 6.0, 7.0], m=[1.0, -2e38, 3.0])
    path, _ = write_shp(13, [content], m_range=(1.0, 3.0))
    with ShpReader(path) as shp:
        (line,) = shp.read_shapes()
    assert isinstance(line, PolyLineZ)
    assert line.z_range == (5.0, 7.0)
    assert line.z_values == (5.0, 6.0, 7.0)
    assert line.m_range == (1.0, 3.0)
    assert line.m_values == (1.0, None, 3.0)


def test_measures_skipped_when_header_has_no_m_range(write_shp):
    content = poly_content(13, LINE_BBOX, [0], LINE_POINTS, z=[5.0, 6.0, 7.0], m=[1.0, 2.0, 3.0])
    path, _ = write_shp(13, [content], m_range=(1.0, 0.0))
    with ShpReader(path) as shp:
        (line,) = shp.read_shapes()
    assert line.m_range is None
    assert line.m_values is None


def test_measures_skipped_when_record_has_no_room(write_shp):
    content = poly_content(15, SQUARE_BBOX, SQUARE_PARTS, SQUARE_WITH_HOLE, z=[1.0] * 9)
    path, _ = write_shp(15, [content], m_range=(0.0, 0.0))
    with ShpReader(path) as shp:
        (polygon,) = shp.read_shapes()
    assert isinstance(polygon, PolygonZ)
    assert polygon.z_values == (1.0,) * 9
    assert polygon.m_values is None


def test_multipoint_kinds(write_shp):
    path, _ = write_shp(8, [multipoint_content(8, LINE_BBOX, LINE_POINTS)])
    with ShpReader(path) as shp:
        (multipoint,) = shp.read_shapes()
    assert isinstance(multipoint, MultiPoint)
    assert multipoint.points == tuple(Point(x, y) for x, y in LINE_POINTS)

    path, _ = write_shp(28, [multipoint_content(28, LINE_BBOX, LINE_POINTS, m=[1.0, 2.0, -9e38])], m_range=(1.0, 2.0))
    with ShpReader(path) as shp:
        (multipoint_m,) = shp.read_shapes()
    assert isinstance(multipoint_m, MultiPointM)
    assert multipoint_m.m_values == (1.0, 2.0, None)


def test_multipatch_part_types(write_shp):
    content = poly_content(
        31,
        SQUARE_BBOX,
        SQUARE_PARTS,
        SQUARE_WITH_HOLE,
        part_types=[2, 3],
        z=[float(i) for i in range(9)],
    )
    path, _ = write_shp(31, [content], m_range=(1.0, 0.0))
    with ShpReader(path) as shp:
        (patch,) = shp.read_shapes()
    assert isinstance(patch, MultiPatch)
    assert patch.part_types == (PartType.OUTER_RING, PartType.INNER_RING)
    assert patch.z_values[-1] == 8.0
    assert [len(part) for part in patch.points_by_parts] == [5, 4]


def test_multipatch_unknown_part_type(write_shp):
    content = poly_content(31, SQUARE_BBOX, [0], SQUARE_WITH_HOLE[:5], part_types=[9], z=[0.0] * 5)
    path, offsets = write_shp(31, [content], m_range=(1.0, 0.0))
    with ShpReader(path) as shp:
        with pytest.raises(UnsupportedPartType) as excinfo:
            shp.read_shapes()
    assert excinfo.value.code == 9
    assert excinfo.value.offset == offsets[0]


def test_close_releases_handle(write_shp):
    path, _ = write_shp(1, [point_content(0.0, 0.0)])
    shp = ShpReader(path)
    with shp:
        pass
    assert shp._handle.closed


def test_polyline_record(write_shp):
    content = poly_content(3, LINE_BBOX, [0, 2], LINE_POINTS + [(3.0, 1.0)])
    path, _ = write_shp(3, [content])
    with ShpReader(path) as shp:
        (line,) = shp.read_shapes()
    assert isinstance(line, PolyLine)
    assert line.parts == (0, 2)
    assert line.points_by_parts == [
        (Point(0.0, 0.0), Point(1.0, 1.0)),
        (Point(2.0, 0.0), Point(3.0, 1.0)),
    ]


@pytest.mark.parametrize(
    "kind, cls, parts, points",
    [
        (23, PolyLineM, [0, 1], LINE_POINTS),
        (25, PolygonM, [0], [(0.0, 0.0), (0.0, 1.0), (1.0, 0.0)]),
    ],
)
def test_measured_part_kinds(write_shp, kind, cls, parts, points):
    content = poly_content(kind, LINE_BBOX, parts, points, m=[1.0, -2e38, 2.0])
    path, _ = write_shp(kind, [content], m_range=(1.0, 2.0))
    with ShpReader(path) as shp:
        (shape,) = shp.read_shapes()
    assert isinstance(shape, cls)
    assert shape.parts == tuple(parts)
    assert shape.points == tuple(Point(x, y) for x, y in points)
    assert shape.m_range == (1.0, 2.0)
    assert shape.m_values == (1.0, None, 2.0)


def test_multipoint_z_record(write_shp):
    content = multipoint_content(18, LINE_BBOX, LINE_POINTS, z=[4.0, 5.0, 6.0], m=[-2e38, 0.5, 1.0])
    path, _ = write_shp(18, [content], m_range=(0.5, 1.0))
    with ShpReader(path) as shp:
        (multipoint,) = shp.read_shapes()
    assert isinstance(multipoint, MultiPointZ)
    assert multipoint.points == tuple(Point(x, y) for x, y in LINE_POINTS)
    assert multipoint.z_range == (4.0, 6.0)
    assert multipoint.z_values == (4.0, 5.0, 6.0)
    assert multipoint.m_values == (None, 0.5, 1.0)


def test_record_cursor_parses_each_layout_once(monkeypatch):
    calls = []
    real_parse = shp_module.parse_layout

    def counting_parse(layout):
        calls.append(layout)
        return real_parse(layout)

    monkeypatch.setattr(shp_module, "parse_layout", counting_parse)
    cursor = shp_module._RecordCursor(struct.pack("<2d", 1.5, 2.5))
    assert cursor.take("<2d") == (1.5, 2.5)
    assert calls == ["<2d"]
    assert cursor.remaining == 0
