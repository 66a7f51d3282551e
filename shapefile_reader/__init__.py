"""
Decoders for the ESRI Shapefile triplet (.shp geometry, .dbf attributes,
.shx offset index).
"""

from .dbf import DbfReader, FieldDescriptor, FieldType, TableHeader, parse_date, parse_value
from .entities import (
    BoundingBox,
    InfoProperty,
    InfoRecord,
    MultiPatch,
    MultiPoint,
    MultiPointM,
    MultiPointZ,
    Partable,
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
    Shapefile,
    ShapefilePath,
    ShapeType,
)
from .errors import (
    LayoutMismatch,
    RecordCountMismatch,
    RecordIndexError,
    ShapefileError,
    ShapeKindMismatch,
    StructuralMismatch,
    TextDecodeError,
    UnsupportedField,
    UnsupportedFieldType,
    UnsupportedGeometryKind,
    UnsupportedPartType,
)
from .geometry import MEASURE_NO_DATA, bounding_box_of, measure_or_none, points_grouped_by_parts, shape_points
from .header import HEADER_SIZE, MainHeader
from .reader import ShapefileReader, open_shapefile, read_all, read_one
from .shp import ShpReader
from .shx import ShxReader
from .trace import RecordTraceLogger, log_omitted_fields
from .unpack import ATTRIBUTE_TEXT_ENCODINGS, DEFAULT_TEXT_ENCODINGS, calcsize, parse_layout, unpack

__all__ = [
    "DbfReader",
    "FieldDescriptor",
    "FieldType",
    "TableHeader",
    "parse_date",
    "parse_value",
    "BoundingBox",
    "InfoProperty",
    "InfoRecord",
    "MultiPatch",
    "MultiPoint",
    "MultiPointM",
    "MultiPointZ",
    "Partable",
    "PartType",
    "Point",
    "PointM",
    "PointZ",
    "PolyLine",
    "PolyLineM",
    "PolyLineZ",
    "Polygon",
    "PolygonM",
    "PolygonZ",
    "Shape",
    "Shapefile",
    "ShapefilePath",
    "ShapeType",
    "LayoutMismatch",
    "RecordCountMismatch",
    "RecordIndexError",
    "ShapefileError",
    "ShapeKindMismatch",
    "StructuralMismatch",
    "TextDecodeError",
    "UnsupportedField",
    "UnsupportedFieldType",
    "UnsupportedGeometryKind",
    "UnsupportedPartType",
    "MEASURE_NO_DATA",
    "bounding_box_of",
    "measure_or_none",
    "points_grouped_by_parts",
    "shape_points",
    "HEADER_SIZE",
    "MainHeader",
    "ShapefileReader",
    "open_shapefile",
    "read_all",
    "read_one",
    "ShpReader",
    "ShxReader",
    "RecordTraceLogger",
    "log_omitted_fields",
    "ATTRIBUTE_TEXT_ENCODINGS",
    "DEFAULT_TEXT_ENCODINGS",
    "calcsize",
    "parse_layout",
    "unpack",
]
