#!/usr/bin/env python3
"""
Cross-check the .shx offset index against a sequential walk of the .shp
geometry stream.  Read-only; prints a short report and exits non-zero when
the two disagree.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Sequence

# Ensure project root on sys.path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from shapefile_reader import HEADER_SIZE, ShapefileError, ShapefilePath, ShpReader, ShxReader


def walk_offsets(shp: ShpReader) -> List[int]:
    offsets: List[int] = []
    offset = HEADER_SIZE
    while True:
        result = shp.read_shape_at(offset)
        if result is None:
            return offsets
        offsets.append(offset)
        offset = result[1]


def compare(path: ShapefilePath, *, limit: int = 20) -> int:
    with ShpReader(path.shp) as shp, ShxReader(path.shx) as shx:
        walked = walk_offsets(shp)
        indexed = list(shx.offsets)
        print(f"{path.shp.name}: declared={shp.declared_length} measured={shp.file_length} bytes")
        print(f"  records walked: {len(walked)}")
        print(f"  records indexed: {len(indexed)}")

    mismatches = [
        (ordinal, a, b)
        for ordinal, (a, b) in enumerate(zip(walked, indexed))
        if a != b
    ]
    for ordinal, walked_offset, indexed_offset in mismatches[:limit]:
        print(f"  #{ordinal:06d} walk=0x{walked_offset:08X} index=0x{indexed_offset:08X}")
    if len(mismatches) > limit:
        print(f"  ... {len(mismatches) - limit} more")

    if mismatches or len(walked) != len(indexed):
        print("  verdict: index disagrees with geometry stream")
        return 1
    print("  verdict: index matches geometry stream")
    return 0


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compare .shx offsets with the .shp record walk.")
    parser.add_argument("input", type=Path, help="Base path (or any of the .shp/.dbf/.shx files)")
    parser.add_argument("--limit", type=int, default=20, help="Maximum mismatches to print (default: 20)")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        return compare(ShapefilePath.from_base(args.input), limit=args.limit)
    except (ShapefileError, OSError) as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
