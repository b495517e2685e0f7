#!/usr/bin/env python3
"""
Squadrat Planner - Region Analysis

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Characterize the unvisited area around the Übersquadrat.

1. Edge analysis: completion of the row/column just outside each side
2. Hole detection: 4-connected unvisited components inside the search
   window (Übersquadrat grown by search_radius layers), found by BFS

Hole ids follow the row-major scan order of the window and are assigned
before the size filter, so they are stable for fixed inputs. Components
larger than max_hole_size are unexplored wilderness and dropped.

Key Interactions:
-----------------
- Input: Ubersquadrat + frozenset visited snapshot
- Output: RegionSnapshot consumed by solvers/scoring.py and both optimizers

CONFIGURATION ARCHITECTURE:
- No CONFIG access - search_radius and max_region_size passed explicitly

For Navigation: Use VS Code outline (Ctrl+Shift+O) to jump between sections.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import AbstractSet, Dict, List, Optional, Tuple

import numpy as np

from squadrat_planner.models.grid_models import (
    Direction,
    EdgeAnalysis,
    Hole,
    SquareKey,
    Ubersquadrat,
)
from squadrat_planner.solvers.grid_geometry import iter_window, layer_distance


# ═══════════════════════════════════════════════════════════════════════════
# 🧱 EDGE ANALYSIS
# ═══════════════════════════════════════════════════════════════════════════


def edge_squares(direction: Direction, base: Ubersquadrat) -> Tuple[SquareKey, ...]:
    """Squares one step outside a side, spanning the side (no corners)."""
    if direction is Direction.N:
        return tuple(SquareKey(base.max_i + 1, j) for j in range(base.min_j, base.max_j + 1))
    if direction is Direction.S:
        return tuple(SquareKey(base.min_i - 1, j) for j in range(base.min_j, base.max_j + 1))
    if direction is Direction.E:
        return tuple(SquareKey(i, base.max_j + 1) for i in range(base.min_i, base.max_i + 1))
    return tuple(SquareKey(i, base.min_j - 1) for i in range(base.min_i, base.max_i + 1))


def analyze_edge(
    direction: Direction, base: Ubersquadrat, visited: AbstractSet[SquareKey]
) -> EdgeAnalysis:
    squares = edge_squares(direction, base)
    total = len(squares)
    visited_count = sum(1 for sq in squares if sq in visited)
    unvisited_count = total - visited_count
    return EdgeAnalysis(
        name=direction,
        squares=squares,
        total=total,
        visited_count=visited_count,
        unvisited_count=unvisited_count,
        completion=visited_count / total * 100.0,
        can_expand=unvisited_count == 0,
    )


def analyze_edges(
    base: Ubersquadrat,
    visited: AbstractSet[SquareKey],
    logger: Optional[logging.Logger] = None,
) -> Dict[Direction, EdgeAnalysis]:
    """Edge analysis for N, S, E, W (in that order)."""
    edges = {d: analyze_edge(d, base, visited) for d in Direction}
    if logger:
        expandable = [d.value for d, e in edges.items() if e.can_expand]
        if expandable:
            logger.info(f"   🧱 Edges {','.join(expandable)} can expand")
    return edges


# ═══════════════════════════════════════════════════════════════════════════
# 🕳️ HOLE DETECTION
# ═══════════════════════════════════════════════════════════════════════════


def _window_index(key: SquareKey, window: Ubersquadrat) -> Tuple[int, int]:
    return key.i - window.min_i, key.j - window.min_j


def visited_mask(window: Ubersquadrat, visited: AbstractSet[SquareKey]) -> np.ndarray:
    """Boolean (rows × cols) array, True where the window square is visited."""
    mask = np.zeros((window.height, window.width), dtype=bool)
    for key in visited:
        if window.contains(key.i, key.j):
            mask[_window_index(key, window)] = True
    return mask


def find_contiguous_region(
    start: SquareKey,
    window: Ubersquadrat,
    blocked: np.ndarray,
    processed: np.ndarray,
    max_region_size: int,
) -> List[SquareKey]:
    """
    Breadth-first flood fill of unvisited squares from start.

    Args:
        start: First square of the region
        window: Search bounds; the fill never leaves them
        blocked: Visited mask of the window (see visited_mask)
        processed: Squares already assigned to a region, updated in place
        max_region_size: At most this many squares are returned. The rest of
            the component is still drained into processed, so no part of it
            can seed another region

    Returns:
        Region squares in discovery order (empty if start is not fillable)
    """
    region: List[SquareKey] = []
    if not window.contains(start.i, start.j):
        return region
    if blocked[_window_index(start, window)] or processed[_window_index(start, window)]:
        return region

    queue = deque([start])
    processed[_window_index(start, window)] = True
    while queue:
        square = queue.popleft()
        if len(region) < max_region_size:
            region.append(square)
        for nb in square.neighbors():
            if not window.contains(nb.i, nb.j):
                continue
            idx = _window_index(nb, window)
            if blocked[idx] or processed[idx]:
                continue
            processed[idx] = True
            queue.append(nb)
    return region


def detect_holes(
    base: Ubersquadrat,
    visited: AbstractSet[SquareKey],
    max_hole_size: int,
    search_radius: int = 5,
    max_region_size: int = 10000,
    logger: Optional[logging.Logger] = None,
) -> List[Hole]:
    """
    Find unvisited components of at most max_hole_size squares.

    A region that hits max_region_size is reported as wilderness whatever
    max_hole_size is, since its true size is unknown.
    """
    window = base.expanded(search_radius)
    blocked = visited_mask(window, visited)
    processed = np.zeros_like(blocked)

    holes: List[Hole] = []
    next_id = 0
    ignored = 0
    for key in iter_window(window):
        idx = _window_index(key, window)
        if blocked[idx] or processed[idx]:
            continue
        region = find_contiguous_region(key, window, blocked, processed, max_region_size)
        if not region:
            continue
        hole_id = next_id
        next_id += 1
        if len(region) > max_hole_size or len(region) >= max_region_size:
            ignored += 1
            continue
        avg_layer = sum(layer_distance(sq.i, sq.j, base).total for sq in region) / len(region)
        holes.append(
            Hole(id=hole_id, squares=tuple(region), size=len(region), avg_layer=avg_layer)
        )

    if logger:
        logger.info(
            f"   🕳️ Holes: {len(holes)} valid (<= {max_hole_size}), {ignored} ignored"
        )
    return holes


def build_hole_map(holes: List[Hole]) -> Dict[SquareKey, Hole]:
    """Square → containing hole, for retained holes only."""
    return {sq: hole for hole in holes for sq in hole.squares}


# ═══════════════════════════════════════════════════════════════════════════
# 📦 SNAPSHOT
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class RegionSnapshot:
    """Edges and holes computed once per optimization call."""

    edges: Dict[Direction, EdgeAnalysis]
    holes: List[Hole]
    hole_map: Dict[SquareKey, Hole] = field(default_factory=dict)

    def edges_as_dicts(self) -> Dict[str, Dict]:
        return {d.value: e.to_dict() for d, e in self.edges.items()}


def analyze_region(
    base: Ubersquadrat,
    visited: AbstractSet[SquareKey],
    max_hole_size: int,
    search_radius: int = 5,
    max_region_size: int = 10000,
    logger: Optional[logging.Logger] = None,
) -> RegionSnapshot:
    edges = analyze_edges(base, visited, logger=logger)
    holes = detect_holes(
        base,
        visited,
        max_hole_size,
        search_radius=search_radius,
        max_region_size=max_region_size,
        logger=logger,
    )
    return RegionSnapshot(edges=edges, holes=holes, hole_map=build_hole_map(holes))
