#!/usr/bin/env python3
"""
Print the header and field descriptors of a .dbf attribute table, plus the
first few raw rows, so odd encodings or widths can be eyeballed.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

# Ensure project root on sys.path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from shapefile_reader import DbfReader, ShapefileError


def describe(path: Path, *, rows: int = 3) -> None:
    with DbfReader(path) as dbf:
        header = dbf.header
        print(f"{path.name}: version=0x{header.version:02X} last_update={header.last_update}")
        print(
            f"  records={header.record_count} header_length={header.header_length} "
            f"record_length={header.record_length}"
        )
        for field in dbf.fields:
            print(
                f"  {field.name:<12} type={field.field_type.value} "
                f"width={field.width:<4d} decimals={field.decimal_count}"
            )
        for ordinal in range(min(rows, len(dbf))):
            record = dbf.read_record(ordinal)
            print(f"  row {ordinal}: {record.as_dict()}")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Dump .dbf header and field descriptors.")
    parser.add_argument("input", type=Path, help="Path to the .dbf file")
    parser.add_argument("--rows", type=int, default=3, help="Number of decoded rows to print (default: 3)")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        describe(args.input.with_suffix(".dbf"), rows=args.rows)
    except (ShapefileError, OSError) as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
