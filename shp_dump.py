#!/usr/bin/env python3
"""
Summarize a shapefile triplet and optionally export it as JSON.

    python shp_dump.py data/countries --limit 5
    python shp_dump.py data/countries --ordinal 100
    python shp_dump.py data/countries --json countries.json --trace records.log

The input may be the shared base name or any one of the .shp/.dbf/.shx
files.  ``--ordinal`` goes through the .shx index and decodes a single
record instead of the whole file.
"""

from __future__ import annotations

import argparse
import dataclasses
import datetime
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from shapefile_reader import (
    HEADER_SIZE,
    InfoRecord,
    RecordTraceLogger,
    Shape,
    ShapefileError,
    ShapefilePath,
    ShpReader,
    UnsupportedGeometryKind,
    log_omitted_fields,
    open_shapefile,
)


def shape_to_dict(shape: Optional[Shape]) -> Optional[Dict[str, Any]]:
    if shape is None:
        return None
    payload = {"kind": shape.shape_type.name}
    payload.update(dataclasses.asdict(shape))
    return payload


def record_to_dict(record: InfoRecord) -> Dict[str, Any]:
    return {
        name: value.isoformat() if isinstance(value, datetime.date) else value
        for name, value in record.as_dict().items()
    }


def trace_records(shp: ShpReader, destination: Path) -> int:
    """Walk the geometry stream record by record and log every offset."""

    trace = RecordTraceLogger(destination)
    offset = HEADER_SIZE
    ordinal = 0
    while offset != shp.file_length:
        try:
            result = shp.read_shape_at(offset)
        except UnsupportedGeometryKind as exc:
            if exc.next_offset is None:
                raise
            trace.record(ordinal=ordinal, offset=offset, next_offset=exc.next_offset, kind=None, note=str(exc))
            offset = exc.next_offset
            ordinal += 1
            continue
        if result is None:
            break
        shape, next_offset = result
        trace.record(
            ordinal=ordinal,
            offset=offset,
            next_offset=next_offset,
            kind=shape.shape_type.name if shape is not None else None,
        )
        offset = next_offset
        ordinal += 1
    trace.flush()
    return ordinal


def _print_preview(shapes: Sequence[Optional[Shape]], records: Sequence[InfoRecord], limit: int) -> None:
    for ordinal, (shape, record) in enumerate(list(zip(shapes, records))[: max(0, limit)]):
        kind = shape.shape_type.name if shape is not None else "NULL"
        points = len(getattr(shape, "points", ())) if shape is not None else 0
        fields = ", ".join(f"{name}={value!r}" for name, value in list(record.as_dict().items())[:4])
        print(f"  #{ordinal:<6d} {kind:<12} points={points:<6d} {fields}")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Summarize a .shp/.dbf/.shx triplet.")
    parser.add_argument("input", type=Path, help="Base path (or any of the .shp/.dbf/.shx files)")
    parser.add_argument("--ordinal", type=int, help="Decode only this record through the .shx index")
    parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Maximum number of records to preview on stdout (default: 10)",
    )
    parser.add_argument("--json", type=Path, help="Optional destination for the full JSON payload")
    parser.add_argument("--trace", type=Path, help="Write one line per geometry record (offset, length, kind)")
    parser.add_argument("--omissions", type=Path, help="Write the attribute cells that could not be parsed")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    path = ShapefilePath.from_base(args.input)

    try:
        with open_shapefile(path) as reader:
            print(f"[+] Opened {path.shp} ({reader.shp.file_length} bytes, {reader.shp.shape_type.name})")
            if args.ordinal is not None:
                shape, record = reader.read_one(args.ordinal)
                payload: Dict[str, Any] = {
                    "ordinal": args.ordinal,
                    "shape": shape_to_dict(shape),
                    "record": record_to_dict(record),
                }
                print(json.dumps(payload, indent=2))
                return 0

            shapefile = reader.read_all()
            bbox = shapefile.bounding_box
            print(
                f"[+] {len(shapefile.shapes)} record(s), bbox=({bbox.x_min:.6f}, {bbox.y_min:.6f})-"
                f"({bbox.x_max:.6f}, {bbox.y_max:.6f})"
            )
            if shapefile.z_range:
                print(f"[i] Z range {shapefile.z_range[0]:.6f} .. {shapefile.z_range[1]:.6f}")
            if shapefile.m_range:
                print(f"[i] M range {shapefile.m_range[0]:.6f} .. {shapefile.m_range[1]:.6f}")
            _print_preview(shapefile.shapes, shapefile.records, args.limit)

            if args.trace:
                count = trace_records(reader.shp, args.trace)
                print(f"[+] Traced {count} geometry record(s) to {args.trace}")
            if args.omissions:
                count = log_omitted_fields(shapefile.records, reader.dbf.field_names, args.omissions)
                print(f"[+] {count} record(s) with unreadable cells written to {args.omissions}")
            if args.json:
                payload = {
                    "source": str(path.shp),
                    "bounding_box": dataclasses.asdict(bbox),
                    "z_range": shapefile.z_range,
                    "m_range": shapefile.m_range,
                    "features": [
                        {"shape": shape_to_dict(shape), "record": record_to_dict(record)}
                        for shape, record in shapefile.shapes_and_records
                    ],
                }
                args.json.write_text(json.dumps(payload, indent=2), encoding="utf-8")
                print(f"[+] JSON written to {args.json}")
    except (ShapefileError, OSError) as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
