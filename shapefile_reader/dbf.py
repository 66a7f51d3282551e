"""
Reader for the dBASE attribute table that accompanies a .shp file.

Layout (little endian):
    32-byte header        version, last update (yy mm dd), record count,
                          header length, record length
    N x 32-byte fields    name (11 bytes), type code, reserved, width,
                          decimal count, reserved
    0x0D                  header terminator
    records               one deletion-flag byte, then the fields as text

Every cell is stored as text.  Cells that cannot be interpreted for their
declared type are left out of the decoded record instead of raising, so one
bad value never hides the rest of the table.
"""

from __future__ import annotations

import datetime
import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .entities import InfoProperty, InfoRecord, PropertyValue
from .errors import RecordIndexError, StructuralMismatch, UnsupportedFieldType
from .unpack import ATTRIBUTE_TEXT_ENCODINGS, Layout, parse_layout, unpack

logger = logging.getLogger(__name__)

TABLE_HEADER_SIZE = 32
TABLE_HEADER_LAYOUT = "<4BIHH20x"
FIELD_DESCRIPTOR_SIZE = 32
FIELD_DESCRIPTOR_LAYOUT = "<11sc4xBB14x"
HEADER_TERMINATOR = b"\r"
DELETION_FLAG_NAME = "DeletionFlag"
TRUE_LOGICALS = frozenset("TtYy")
_PADDING = " \t\r\n\x00"
_INTEGER = re.compile(r"[+-]?[0-9]+", re.ASCII)
_DATE = re.compile(r"[0-9]{8}", re.ASCII)
_REAL = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?", re.ASCII)


class FieldType(str, Enum):
    CHARACTER = "C"
    DATE = "D"
    NUMERIC = "N"
    FLOAT = "F"
    LOGICAL = "L"
    MEMO = "M"


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    field_type: FieldType
    width: int
    decimal_count: int = 0


DELETION_FLAG = FieldDescriptor(DELETION_FLAG_NAME, FieldType.CHARACTER, 1)


@dataclass(frozen=True)
class TableHeader:
    version: int
    last_update: Optional[datetime.date]
    record_count: int
    header_length: int
    record_length: int


def parse_date(text: str) -> Optional[datetime.date]:
    """Parse an 8-digit ``YYYYMMDD`` cell; anything else yields ``None``."""

    if not _DATE.fullmatch(text):
        return None
    try:
        return datetime.date(int(text[:4]), int(text[4:6]), int(text[6:]))
    except ValueError:
        return None


def parse_value(field: FieldDescriptor, raw: str) -> Optional[PropertyValue]:
    """Interpret one trimmed cell; ``None`` means the cell is left out."""

    text = raw.strip(_PADDING)
    if field.field_type in (FieldType.CHARACTER, FieldType.MEMO):
        return text
    if field.field_type is FieldType.DATE:
        return parse_date(text)
    if field.field_type is FieldType.NUMERIC:
        if not text:
            return ""
        if field.decimal_count > 0 or "." in text:
            return _parse_float(text)
        if not _INTEGER.fullmatch(text):
            return None
        return int(text)
    if field.field_type is FieldType.FLOAT:
        return _parse_float(text)
    if field.field_type is FieldType.LOGICAL:
        return text in TRUE_LOGICALS
    raise UnsupportedFieldType(field.name, field.field_type.value)


def _parse_float(text: str) -> Optional[float]:
    if not _REAL.fullmatch(text):
        return None
    return float(text)


def _last_update(year_offset: int, month: int, day: int) -> Optional[datetime.date]:
    try:
        return datetime.date(1900 + year_offset, month, day)
    except ValueError:
        return None


class DbfReader:
    def __init__(self, path: str | Path, *, encodings: Sequence[str] = ATTRIBUTE_TEXT_ENCODINGS) -> None:
        self.path = Path(path)
        self.encodings = tuple(encodings)
        self._handle = self.path.open("rb")
        try:
            self.header = self._read_header()
            self.fields = self._read_fields()
            self._record_layout = self._build_record_layout()
        except BaseException:
            self._handle.close()
            raise

    def __enter__(self) -> "DbfReader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._handle.close()

    def __len__(self) -> int:
        return self.header.record_count

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(field.name for field in self.fields[1:])

    def record_offset(self, ordinal: int) -> int:
        if not 0 <= ordinal < self.header.record_count:
            raise RecordIndexError(ordinal, self.header.record_count)
        return self.header.header_length + self.header.record_length * ordinal

    def read_records(self) -> List[InfoRecord]:
        return [self.read_record(ordinal) for ordinal in range(self.header.record_count)]

    def read_record(self, ordinal: int) -> InfoRecord:
        return self.read_record_at(self.record_offset(ordinal))

    def read_record_at(self, offset: int) -> InfoRecord:
        self._handle.seek(offset)
        cells = unpack(self._handle.read(self.header.record_length), self._record_layout, encodings=self.encodings)
        properties: List[InfoProperty] = []
        # The first cell is the deletion flag and never reaches the caller.
        for field, raw in zip(self.fields[1:], cells[1:]):
            value = parse_value(field, raw)
            if value is None:
                logger.debug(f"{self.path.name}@{offset}: dropping unreadable {field.field_type.name} cell {field.name}={raw!r}")
                continue
            properties.append(InfoProperty(field.name, value))
        return InfoRecord(tuple(properties))

    def _read_header(self) -> TableHeader:
        self._handle.seek(0)
        version, yy, mm, dd, record_count, header_length, record_length = unpack(
            self._handle.read(TABLE_HEADER_SIZE), TABLE_HEADER_LAYOUT
        )
        return TableHeader(
            version=version,
            last_update=_last_update(yy, mm, dd),
            record_count=record_count,
            header_length=header_length,
            record_length=record_length,
        )

    def _read_fields(self) -> Tuple[FieldDescriptor, ...]:
        count = (self.header.header_length - 33) // FIELD_DESCRIPTOR_SIZE
        fields: List[FieldDescriptor] = [DELETION_FLAG]
        self._handle.seek(TABLE_HEADER_SIZE)
        for _ in range(max(count, 0)):
            raw_name, type_code, width, decimal_count = unpack(
                self._handle.read(FIELD_DESCRIPTOR_SIZE), FIELD_DESCRIPTOR_LAYOUT, encodings=self.encodings
            )
            name = raw_name.split("\x00", 1)[0].strip()
            try:
                field_type = FieldType(type_code)
            except ValueError:
                raise UnsupportedFieldType(name, type_code) from None
            fields.append(FieldDescriptor(name, field_type, width, decimal_count))

        terminator = self._handle.read(1)
        if terminator != HEADER_TERMINATOR:
            raise StructuralMismatch(
                f"{self.path.name}: expected header terminator 0x0D after {count} field(s), found {terminator!r}"
            )
        return tuple(fields)

    def _build_record_layout(self) -> Layout:
        total = sum(field.width for field in self.fields)
        if total != self.header.record_length:
            raise StructuralMismatch(
                f"{self.path.name}: field widths add up to {total} bytes "
                f"but the header declares {self.header.record_length}-byte records"
            )
        return parse_layout("<" + "".join(f"{field.width}s" for field in self.fields))
