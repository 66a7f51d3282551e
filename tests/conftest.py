"""Shared fixtures: synthetic shapefile triplets written to a temporary directory."""

from pathlib import Path

import pytest

from shapefile_fixtures import (
    COUNTRY_FIELDS,
    SQUARE_BBOX,
    SQUARE_PARTS,
    SQUARE_WITH_HOLE,
    build_dbf,
    build_shp,
    build_shx,
    point_content,
    poly_content,
)
from shapefile_reader import ShapefilePath


@pytest.fixture
def write_triplet(tmp_path):
    """Write .shp/.shx/.dbf bytes under a shared base name and return the path triplet."""

    def _write(name: str, shp: bytes, shx: bytes, dbf: bytes) -> ShapefilePath:
        base = tmp_path / name
        Path(f"{base}.shp").write_bytes(shp)
        Path(f"{base}.shx").write_bytes(shx)
        Path(f"{base}.dbf").write_bytes(dbf)
        return ShapefilePath.from_base(base)

    return _write


@pytest.fixture
def polygon_triplet(write_triplet):
    """One polygon (outer square plus a triangular hole) and one attribute row."""

    content = poly_content(5, SQUARE_BBOX, SQUARE_PARTS, SQUARE_WITH_HOLE)
    shp, offsets = build_shp(5, [content], bbox=SQUARE_BBOX)
    shx = build_shx(5, offsets, [len(content)])
    dbf = build_dbf(COUNTRY_FIELDS, [["Freedonia", "1234", "56.789", "18480101", "T", "0.5000"]])
    return write_triplet("freedonia", shp, shx, dbf)


@pytest.fixture
def points_triplet(write_triplet):
    """Four points with one null record in the middle and matching rows."""

    contents = [
        point_content(1.0, 1.0),
        point_content(2.0, 4.0),
        b"\x00\x00\x00\x00",
        point_content(-3.0, 0.5),
    ]
    shp, offsets = build_shp(1, contents, bbox=(-3.0, 0.5, 2.0, 4.0))
    shx = build_shx(1, offsets, [len(c) for c in contents])
    dbf = build_dbf(
        [("ID", "N", 4, 0), ("LABEL", "C", 8, 0)],
        [["1", "alpha"], ["2", "beta"], ["3", "gamma"], ["4", "delta"]],
    )
    return write_triplet("points", shp, shx, dbf)
