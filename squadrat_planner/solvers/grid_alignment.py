#!/usr/bin/env python3
"""
Squadrat Planner - Grid Alignment

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Turn already-parsed polygon rings into optimizer inputs:
grid parameters, the Übersquadrat in index space and the visited set.

The grid is anchored at the Übersquadrat's south-west corner, and the step
sizes come from its extent divided by its size in squares. Visited squares
are placed by the centre of their bounding box.

Key Interactions:
-----------------
- Input: polygon rings as (lon, lat) vertex sequences (GeoJSON order) from
  the file-parsing collaborator
- Output: GridParams, Ubersquadrat, frozenset[SquareKey]

For Navigation: Use VS Code outline (Ctrl+Shift+O) to jump between sections.
"""

import logging
import math
from typing import FrozenSet, Optional, Sequence, Tuple

import numpy as np

from squadrat_planner.models.grid_models import GridParams, SquareKey, Ubersquadrat

Ring = Sequence[Tuple[float, float]]

# (west, south, east, north)
Bounds = Tuple[float, float, float, float]


def ring_bounds(ring: Ring) -> Bounds:
    """Bounding box of a (lon, lat) ring."""
    coords = np.asarray(ring, dtype=float)
    if coords.ndim != 2 or coords.shape[0] == 0:
        raise ValueError("ring must be a non-empty sequence of (lon, lat) pairs")
    lons, lats = coords[:, 0], coords[:, 1]
    return float(lons.min()), float(lats.min()), float(lons.max()), float(lats.max())


def select_ubersquadrat_polygon(rings: Sequence[Ring]) -> Optional[Ring]:
    """The ring with the largest bounding-box area (None when empty)."""
    best: Optional[Ring] = None
    best_area = 0.0
    for ring in rings:
        if len(ring) == 0:
            continue
        west, south, east, north = ring_bounds(ring)
        area = (north - south) * (east - west)
        if area > best_area:
            best_area = area
            best = ring
    return best


def grid_params_from_ubersquadrat(ring: Ring, size: int) -> GridParams:
    """
    Grid anchored at the Übersquadrat's SW corner.

    Raises:
        ValueError: If size < 1 or the ring has zero extent
    """
    if size < 1:
        raise ValueError(f"Übersquadrat size must be >= 1, got {size}")
    west, south, east, north = ring_bounds(ring)
    return GridParams(
        lat_step=(north - south) / size,
        lon_step=(east - west) / size,
        origin_lat=south,
        origin_lon=west,
    )


def ubersquadrat_for_size(size: int) -> Ubersquadrat:
    """Index bounds of a size × size Übersquadrat anchored at the origin."""
    return Ubersquadrat(0, size - 1, 0, size - 1)


def square_from_point(lat: float, lon: float, grid: GridParams) -> SquareKey:
    """Square containing a point."""
    return SquareKey(
        int(math.floor((lat - grid.origin_lat) / grid.lat_step)),
        int(math.floor((lon - grid.origin_lon) / grid.lon_step)),
    )


def visited_set_from_polygons(
    rings: Sequence[Ring],
    grid: GridParams,
    max_vertices: int = 100,
    logger: Optional[logging.Logger] = None,
) -> FrozenSet[SquareKey]:
    """
    Map each visited-square polygon to its grid address.

    Rings with more than max_vertices vertices are outlines of merged
    regions (the Übersquadrat itself), not single squares, and are skipped.
    """
    visited = set()
    skipped = 0
    for ring in rings:
        if len(ring) == 0:
            continue
        if len(ring) > max_vertices:
            skipped += 1
            continue
        west, south, east, north = ring_bounds(ring)
        visited.add(square_from_point((south + north) / 2, (west + east) / 2, grid))

    if logger:
        logger.info(
            f"   🗺️ Visited set: {len(visited)} squares from {len(rings)} polygons "
            f"({skipped} outlines skipped)"
        )
    return frozenset(visited)
