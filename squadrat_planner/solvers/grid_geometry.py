#!/usr/bin/env python3
"""
Squadrat Planner - Grid Geometry Utilities

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Pure conversions between integer grid addresses (i, j) and
lat/lon rectangles, plus the layer-distance metrics every optimizer uses.

Key Functions:
- rect_from_ij / square_center / rect_to_box: grid address → geometry
- layer_distance: per-axis distance from the Übersquadrat border
- is_on_border: ring of squares one step outside, corners included
- edge_label: which side(s) a square lies beyond ("N", "NE", ...)

CONFIGURATION ARCHITECTURE:
- No CONFIG access - all functions accept explicit parameters
- No side effects, no failure modes for well-formed integer input

For Navigation: Use VS Code outline (Ctrl+Shift+O) to jump between sections.
"""

from typing import Iterator, NamedTuple

from shapely.geometry import Polygon, box

from squadrat_planner.models.grid_models import (
    Direction,
    GeoPoint,
    GridParams,
    Rect,
    SquareKey,
    Ubersquadrat,
)


class LayerDistance(NamedTuple):
    """Distance from the border along each axis; total is their sum."""

    dist_i: int
    dist_j: int
    total: int


# ═══════════════════════════════════════════════════════════════════════════
# 📐 GRID ↔ GEOGRAPHY
# ═══════════════════════════════════════════════════════════════════════════


def rect_from_ij(i: int, j: int, grid: GridParams) -> Rect:
    """((south, west), (north, east)) bounds of square (i, j)."""
    south = grid.origin_lat + i * grid.lat_step
    west = grid.origin_lon + j * grid.lon_step
    return ((south, west), (south + grid.lat_step, west + grid.lon_step))


def square_center(i: int, j: int, grid: GridParams) -> GeoPoint:
    south = grid.origin_lat + i * grid.lat_step
    west = grid.origin_lon + j * grid.lon_step
    return GeoPoint(lat=south + grid.lat_step / 2, lon=west + grid.lon_step / 2)


def rect_center(rect: Rect) -> GeoPoint:
    (south, west), (north, east) = rect
    return GeoPoint(lat=(south + north) / 2, lon=(west + east) / 2)


def rect_to_box(rect: Rect) -> Polygon:
    """Shapely box of a rectangle in (lon, lat) axis order."""
    (south, west), (north, east) = rect
    return box(west, south, east, north)


# ═══════════════════════════════════════════════════════════════════════════
# 📏 LAYER METRICS
# ═══════════════════════════════════════════════════════════════════════════


def layer_distance(i: int, j: int, base: Ubersquadrat) -> LayerDistance:
    """
    Layer distance of (i, j) from the Übersquadrat border.

    Per axis, the number of squares between the candidate and the ring just
    outside the Übersquadrat (0 on that ring or inside the span). A square
    one step outside any side has total 0, two steps out has total 1.
    """
    dist_i = max(0, base.min_i - i - 1, i - base.max_i - 1)
    dist_j = max(0, base.min_j - j - 1, j - base.max_j - 1)
    return LayerDistance(dist_i, dist_j, dist_i + dist_j)


def is_on_border(i: int, j: int, base: Ubersquadrat) -> bool:
    """True iff (i, j) is on the ring one step outside, corners included."""
    in_j_ring = base.min_j - 1 <= j <= base.max_j + 1
    in_i_ring = base.min_i - 1 <= i <= base.max_i + 1
    return (
        (i == base.max_i + 1 and in_j_ring)
        or (i == base.min_i - 1 and in_j_ring)
        or (j == base.max_j + 1 and in_i_ring)
        or (j == base.min_j - 1 and in_i_ring)
    )


def manhattan_distance(a: SquareKey, b: SquareKey) -> int:
    return abs(a.i - b.i) + abs(a.j - b.j)


def edge_label(i: int, j: int, base: Ubersquadrat) -> str:
    """Sides the square lies beyond, N/S first then E/W ("" if inside)."""
    label = ""
    if i > base.max_i:
        label += Direction.N.value
    elif i < base.min_i:
        label += Direction.S.value
    if j > base.max_j:
        label += Direction.E.value
    elif j < base.min_j:
        label += Direction.W.value
    return label


def iter_window(bounds: Ubersquadrat) -> Iterator[SquareKey]:
    """Row-major scan of a window; fixes hole and candidate id order."""
    for i in range(bounds.min_i, bounds.max_i + 1):
        for j in range(bounds.min_j, bounds.max_j + 1):
            yield SquareKey(i, j)
