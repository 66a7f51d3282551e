#!/usr/bin/env python3
"""
Rasterize the geometry of a shapefile to PNG previews without a GIS stack.

    python render_shapefile_png.py data/countries \
        --preview countries_thumb.png --preview-size 256 \
        --hires countries_full.png --hires-size 2048

Polygon rings are outlined (optionally filled), polylines are stroked part by
part and point kinds are drawn as small dots.  Only ``--ordinal`` records are
drawn when that option is given.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np
from PIL import Image, ImageDraw

from shapefile_reader import (
    MultiPatch,
    Polygon,
    PolygonM,
    PolygonZ,
    Shape,
    ShapefileError,
    open_shapefile,
    points_grouped_by_parts,
    shape_points,
)

POLYGON_KINDS = (Polygon, PolygonZ, PolygonM, MultiPatch)

Bounds = Tuple[float, float, float, float]


def load_shapes(path: Path, ordinals: Sequence[int] | None = None) -> Tuple[List[Optional[Shape]], Bounds]:
    with open_shapefile(path) as reader:
        if ordinals:
            shapes = [reader.read_one(ordinal)[0] for ordinal in ordinals]
        else:
            shapes = reader.read_all().shapes
    shapes = list(shapes)
    if not any(shape is not None for shape in shapes):
        raise RuntimeError("No renderable shapes were found in the requested records.")
    return shapes, _collect_bounds(shapes)


def _collect_bounds(shapes: Sequence[Optional[Shape]]) -> Bounds:
    coords = [pt for shape in shapes for pt in shape_points(shape)]
    if not coords:
        raise RuntimeError("Unable to compute bounds for the requested geometry.")
    array = np.asarray(coords, dtype=float)
    min_x, min_y = array.min(axis=0)
    max_x, max_y = array.max(axis=0)
    return float(min_x), float(max_x), float(min_y), float(max_y)


def _build_transform(
    bounds: Bounds,
    size_px: int,
    padding_ratio: float,
) -> Callable[[np.ndarray], np.ndarray]:
    min_x, max_x, min_y, max_y = bounds
    width = max(max_x - min_x, 1e-9)
    height = max(max_y - min_y, 1e-9)
    pad = max(width, height) * padding_ratio

    world_min = np.array([min_x - pad, min_y - pad])
    world_size = np.array([width + 2 * pad, height + 2 * pad])
    scale = float(np.min(size_px / world_size))
    offset = (size_px - world_size * scale) / 2.0

    def transform(points: np.ndarray) -> np.ndarray:
        pixels = (points - world_min) * scale + offset
        # Image rows grow downward.
        pixels[:, 1] = size_px - pixels[:, 1]
        return pixels

    return transform


def _to_pixels(transform: Callable[[np.ndarray], np.ndarray], points: Sequence[Tuple[float, float]]) -> list:
    pixels = transform(np.asarray(points, dtype=float).reshape(-1, 2))
    return [tuple(row) for row in pixels.tolist()]


def render_png(
    shapes: Sequence[Optional[Shape]],
    bounds: Bounds,
    destination: Path,
    size_px: int,
    *,
    padding_ratio: float = 0.05,
    fill: str | None = None,
) -> None:
    transform = _build_transform(bounds, size_px, padding_ratio)

    image = Image.new("RGBA", (size_px, size_px), (255, 255, 255, 0))
    draw = ImageDraw.Draw(image)
    stroke = max(1, int(size_px / 256))
    dot = stroke * 2

    for shape in shapes:
        if shape is None:
            continue
        groups = points_grouped_by_parts(shape)
        if groups is None:
            for px, py in _to_pixels(transform, shape_points(shape)):
                draw.ellipse([px - dot, py - dot, px + dot, py + dot], fill="black")
            continue
        for group in groups:
            pixels = _to_pixels(transform, [(pt.x, pt.y) for pt in group])
            if isinstance(shape, POLYGON_KINDS) and len(pixels) >= 3:
                draw.polygon(pixels, outline="black", fill=fill)
            elif len(pixels) >= 2:
                draw.line(pixels, fill="black", width=stroke)

    destination.parent.mkdir(parents=True, exist_ok=True)
    image.save(destination)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render shapefile geometry to PNG.")
    parser.add_argument("input", type=Path, help="Base path (or any of the .shp/.dbf/.shx files)")
    parser.add_argument("--preview", type=Path, help="Path for the low-res preview PNG")
    parser.add_argument("--preview-size", type=int, default=256, help="Preview size in pixels (square)")
    parser.add_argument("--hires", type=Path, help="Path for the high-res PNG")
    parser.add_argument("--hires-size", type=int, default=2048, help="High-res size in pixels (square)")
    parser.add_argument("--ordinal", type=int, action="append", help="Render only this record (repeatable)")
    parser.add_argument("--fill", help="Optional polygon fill colour (e.g. '#d0d0ff')")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    if not args.preview and not args.hires:
        raise SystemExit("Specify --preview and/or --hires to render a PNG.")

    try:
        shapes, bounds = load_shapes(args.input, args.ordinal)
        if args.preview:
            render_png(shapes, bounds, args.preview, args.preview_size, fill=args.fill)
            print(f"[+] Preview PNG written to {args.preview}")
        if args.hires:
            render_png(shapes, bounds, args.hires, args.hires_size, fill=args.fill)
            print(f"[+] High-res PNG written to {args.hires}")
    except (ShapefileError, OSError, RuntimeError) as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
