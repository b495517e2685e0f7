#!/usr/bin/env python3
"""
Squadrat Planner - Route Solver

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Order waypoints into a short route.

ALGORITHMS:
1. Nearest neighbour construction from the start point (ties go to the
   earliest input point)
2. 2-opt local search: reverse route[i:j+1] whenever that strictly shortens
   the route; passes repeat until none improves or the pass cap is hit.
   The first and last points never move, so a roundtrip stays closed.
3. Alternative refinement: swap a waypoint for one of its runner-up
   candidates when that shortens its two adjacent legs

Heuristic, not optimal: 2-opt guarantees distance <= the construction's
distance only.

Distances are great-circle km (routing/geodesy.py). A precomputed numpy
distance matrix backs the 2-opt gain test.

CONFIGURATION ARCHITECTURE:
- No CONFIG access - limits passed explicitly or via RouteSolverConfig

For Navigation: Use VS Code outline (Ctrl+Shift+O) to jump between sections.
"""

import logging
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np

from squadrat_planner.models.route_models import Route, Waypoint
from squadrat_planner.routing.geodesy import distance_km, distance_matrix_km


# ═══════════════════════════════════════════════════════════════════════════
# 📏 DISTANCE
# ═══════════════════════════════════════════════════════════════════════════


def calculate_route_distance(route: Sequence[Any]) -> float:
    """Sum of great-circle legs in km; 0 for fewer than two points."""
    total = 0.0
    for a, b in zip(route, route[1:]):
        total += distance_km(a, b)
    return total


def build_distance_matrix(points: Sequence[Any]) -> np.ndarray:
    """(n × n) great-circle km between all points."""
    return distance_matrix_km(points)


def _matrix_route_distance(order: Sequence[int], matrix: np.ndarray) -> float:
    if len(order) < 2:
        return 0.0
    idx = np.asarray(order)
    return float(matrix[idx[:-1], idx[1:]].sum())


# ═══════════════════════════════════════════════════════════════════════════
# 🧭 CONSTRUCTION
# ═══════════════════════════════════════════════════════════════════════════


def nearest_neighbor(
    points: Sequence[Any], start: Any, roundtrip: bool = False
) -> List[Any]:
    """
    Greedy tour: start, then repeatedly the closest unvisited point.

    Returns:
        [start, p_a, p_b, ...] (+ [start] if roundtrip). Every input point
        appears exactly once.
    """
    route = [start]
    remaining = list(points)
    current = start
    while remaining:
        distances = [distance_km(current, p) for p in remaining]
        nearest = int(np.argmin(distances))
        current = remaining.pop(nearest)
        route.append(current)
    if roundtrip:
        route.append(start)
    return route


# ═══════════════════════════════════════════════════════════════════════════
# 🔁 2-OPT
# ═══════════════════════════════════════════════════════════════════════════


def _two_opt_order(
    matrix: np.ndarray, max_iterations: int, epsilon: float
) -> Tuple[List[int], int]:
    """2-opt over indices 0..n-1 with fixed endpoints; returns (order, passes)."""
    n = matrix.shape[0]
    order = list(range(n))
    passes = 0
    improved = True
    while improved and passes < max_iterations:
        improved = False
        passes += 1
        for i in range(1, n - 2):
            for j in range(i + 1, n - 1):
                a, b = order[i - 1], order[i]
                c, d = order[j], order[j + 1]
                gain = (matrix[a, b] + matrix[c, d]) - (matrix[a, c] + matrix[b, d])
                if gain > epsilon:
                    order[i : j + 1] = reversed(order[i : j + 1])
                    improved = True
    return order, passes


def two_opt_optimize(
    route: Sequence[Any],
    max_iterations: int = 100,
    epsilon: float = 1e-9,
    logger: Optional[logging.Logger] = None,
) -> List[Any]:
    """
    Improve a route with 2-opt edge swaps.

    The input is never modified. Routes with fewer than 4 points are
    returned as a copy.
    """
    points = list(route)
    if len(points) < 4:
        return points

    matrix = build_distance_matrix(points)
    order, passes = _two_opt_order(matrix, max_iterations, epsilon)

    if logger:
        before = _matrix_route_distance(list(range(len(points))), matrix)
        after = _matrix_route_distance(order, matrix)
        logger.info(
            f"      2-opt: {before:.2f}km → {after:.2f}km in {passes} passes"
        )
    return [points[k] for k in order]


def solve_tsp(
    points: Sequence[Any],
    start: Any,
    roundtrip: bool = False,
    optimize: bool = True,
    max_iterations: int = 100,
    epsilon: float = 1e-9,
    logger: Optional[logging.Logger] = None,
) -> Route:
    """
    Nearest neighbour + optional 2-opt.

    Returns:
        Route whose points start with start (and end with it if roundtrip).
        No points gives Route((start,), 0.0).
    """
    if not points:
        return Route(points=(start,), distance_km=0.0)

    route = nearest_neighbor(points, start, roundtrip=roundtrip)
    if optimize:
        route = two_opt_optimize(
            route, max_iterations=max_iterations, epsilon=epsilon, logger=logger
        )
    distance = calculate_route_distance(route)

    if logger:
        logger.info(f"   🔀 TSP: {len(points)} points, {distance:.2f}km")
    return Route(points=tuple(route), distance_km=distance)


# ═══════════════════════════════════════════════════════════════════════════
# 🎛️ REFINEMENT
# ═══════════════════════════════════════════════════════════════════════════


def refine_waypoints(
    waypoints: Sequence[Waypoint],
    start: Optional[Any] = None,
    roundtrip: bool = False,
    logger: Optional[logging.Logger] = None,
) -> List[Waypoint]:
    """
    Swap each waypoint for an alternative when it shortens the adjacent legs.

    Waypoints are visited in order; each decision sees the refined
    predecessor. The neighbours are the start point (before the first),
    the start point again (after the last, roundtrip only) and the
    adjacent waypoints otherwise.
    """
    refined = list(waypoints)
    swaps = 0
    last = len(refined) - 1
    for k, wp in enumerate(refined):
        if not wp.alternatives:
            continue
        prev = refined[k - 1] if k > 0 else start
        nxt = refined[k + 1] if k < last else (start if roundtrip else None)

        def legs(p: Any) -> float:
            total = 0.0
            if prev is not None:
                total += distance_km(prev, p)
            if nxt is not None:
                total += distance_km(p, nxt)
            return total

        best = wp
        best_cost = legs(wp)
        for alt in wp.alternatives:
            cost = legs(alt)
            if cost < best_cost:
                best, best_cost = alt, cost
        if best is not wp:
            refined[k] = wp.moved_to(best)
            swaps += 1

    if logger:
        logger.info(f"      Refinement: {swaps} waypoints moved to alternatives")
    return refined
