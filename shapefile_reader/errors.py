from __future__ import annotations


class ShapefileError(Exception):
    """Base class for every decoding failure raised by this package."""


class StructuralMismatch(ShapefileError, ValueError):
    """Declared and actual sizes, widths or kinds disagree."""


class LayoutMismatch(StructuralMismatch):
    def __init__(self, layout: str, expected: int, actual: int) -> None:
        super().__init__(f"layout {layout!r} describes {expected} bytes but the buffer holds {actual}")
        self.layout = layout
        self.expected = expected
        self.actual = actual


class ShapeKindMismatch(StructuralMismatch):
    pass


class RecordCountMismatch(StructuralMismatch):
    def __init__(self, shapes: int, records: int) -> None:
        super().__init__(f"geometry stream holds {shapes} shape(s) but the attribute table holds {records} record(s)")
        self.shapes = shapes
        self.records = records


class UnsupportedField(ShapefileError, ValueError):
    """Unknown token in a byte layout string."""


class UnsupportedGeometryKind(ShapefileError, ValueError):
    def __init__(self, code: int, *, offset: int | None = None, next_offset: int | None = None) -> None:
        where = f" at offset {offset}" if offset is not None else ""
        super().__init__(f"unsupported geometry kind {code}{where}")
        self.code = code
        self.offset = offset
        # Callers can resume iteration from here.
        self.next_offset = next_offset


class UnsupportedPartType(UnsupportedGeometryKind):
    def __init__(self, code: int, *, offset: int | None = None, next_offset: int | None = None) -> None:
        ShapefileError.__init__(self, f"unsupported multipatch part type {code}")
        self.code = code
        self.offset = offset
        self.next_offset = next_offset


class UnsupportedFieldType(ShapefileError, ValueError):
    def __init__(self, name: str, code: str) -> None:
        super().__init__(f"field {name!r} declares unsupported type {code!r}")
        self.name = name
        self.code = code


class TextDecodeError(ShapefileError, ValueError):
    def __init__(self, raw: bytes, encodings: tuple[str, ...]) -> None:
        super().__init__(f"could not decode {raw[:16]!r} with any of {', '.join(encodings)}")
        self.raw = raw
        self.encodings = encodings


class RecordIndexError(ShapefileError, IndexError):
    def __init__(self, ordinal: int, count: int) -> None:
        super().__init__(f"record {ordinal} is out of range (index holds {count} record(s))")
        self.ordinal = ordinal
        self.count = count
