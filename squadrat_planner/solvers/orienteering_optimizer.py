#!/usr/bin/env python3
"""
Squadrat Planner - Orienteering Optimizer

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Build a route square by square under a cycling-distance
budget, instead of choosing a fixed number of squares and routing after.

LOOP (bounded by max_iterations):
1. Frontier: unvisited squares outside the Übersquadrat, layer distance
   <= frontier_max_layer, within max_gap_km of the current position
   (× first_gap_multiplier on the first iteration), matching a direction
2. Score: strategic value (shared scoring, with the local visited copy for
   adjacency and hole completion) and estimated cycling distance
   (great-circle × road_factor)
3. final = efficiency × w × scale + strategic × (2 - w), with w the clamped
   routing weight and efficiency = strategic / cycling distance
4. Commit the best square unless it would exceed the budget, which stops
   the loop. The budget is never exceeded.

Edges and holes are computed once from the caller's visited set; only the
local visited copy grows during the loop.

Returned squares are in route order.

CONFIGURATION ARCHITECTURE:
- No CONFIG access - all settings via OrienteeringConfig / ScoringConfig

For Navigation: Use VS Code outline (Ctrl+Shift+O) to jump between sections.
"""

import logging
from dataclasses import dataclass
from typing import AbstractSet, Any, Dict, Iterable, List, Optional

from squadrat_planner.config_types import OrienteeringConfig, RegionConfig, ScoringConfig
from squadrat_planner.models.grid_models import (
    Approach,
    Candidate,
    GeoPoint,
    GridParams,
    OptimizationMode,
    OptimizationResult,
    SelectedSquare,
    SquareKey,
    Ubersquadrat,
    to_visited_set,
)
from squadrat_planner.routing.geodesy import distance_km, to_geo_point
from squadrat_planner.solvers.grid_geometry import iter_window, rect_from_ij, square_center
from squadrat_planner.solvers.region_analysis import RegionSnapshot, analyze_region
from squadrat_planner.solvers.scoring import (
    filters_directions,
    make_candidate,
    matches_directions,
    normalize_directions,
    score_candidate,
)


@dataclass(frozen=True)
class FrontierScore:
    """One frontier candidate scored against the current route position."""

    candidate: Candidate
    strategic_score: float
    cycling_distance_km: float
    efficiency: float
    final_score: float
    breakdown: Dict[str, float]
    hole_id: Optional[int]


# ═══════════════════════════════════════════════════════════════════════════
# 📍 START POINT AND DISTANCE
# ═══════════════════════════════════════════════════════════════════════════


def ubersquadrat_center(base: Ubersquadrat, grid: GridParams) -> GeoPoint:
    """Geometric centre of the Übersquadrat rectangle."""
    return GeoPoint(
        lat=grid.origin_lat + (base.min_i + base.max_i + 1) / 2 * grid.lat_step,
        lon=grid.origin_lon + (base.min_j + base.max_j + 1) / 2 * grid.lon_step,
    )


def estimate_cycling_distance(
    origin: GeoPoint, key: SquareKey, grid: GridParams, road_factor: float
) -> float:
    """Straight-line km to the square centre × road factor."""
    return distance_km(origin, square_center(key.i, key.j, grid)) * road_factor


# ═══════════════════════════════════════════════════════════════════════════
# 🌐 FRONTIER
# ═══════════════════════════════════════════════════════════════════════════


def find_frontier(
    base: Ubersquadrat,
    visited: AbstractSet[SquareKey],
    position: GeoPoint,
    grid: GridParams,
    directions: AbstractSet[Any],
    config: OrienteeringConfig,
    first_iteration: bool = False,
) -> List[Candidate]:
    """Frontier candidates in row-major order."""
    max_gap = config.max_gap_km * (config.first_gap_multiplier if first_iteration else 1.0)
    use_filter = filters_directions(directions)
    frontier = []
    for key in iter_window(base.expanded(config.frontier_max_layer + 1)):
        if key in visited or base.contains(key.i, key.j):
            continue
        candidate = make_candidate(key, base)
        if candidate.layer_distance > config.frontier_max_layer:
            continue
        if estimate_cycling_distance(position, key, grid, config.road_factor) > max_gap:
            continue
        if use_filter and not matches_directions(key, base, directions):
            continue
        frontier.append(candidate)
    return frontier


def score_frontier(
    frontier: List[Candidate],
    base: Ubersquadrat,
    snapshot: RegionSnapshot,
    local_visited: AbstractSet[SquareKey],
    position: GeoPoint,
    grid: GridParams,
    mode: OptimizationMode,
    directions: AbstractSet[Any],
    routing_weight: float,
    scoring: ScoringConfig,
    config: OrienteeringConfig,
) -> List[FrontierScore]:
    weight = config.clamp_weight(routing_weight)
    results = []
    for candidate in frontier:
        scored = score_candidate(
            candidate,
            base,
            snapshot.edges,
            snapshot.hole_map,
            local_visited,
            mode,
            directions,
            scoring,
            config.adjacency_bonus,
        )
        cycling = estimate_cycling_distance(position, candidate.key, grid, config.road_factor)
        efficiency = scored.score / cycling if cycling > 0 else 0.0
        final = efficiency * weight * config.efficiency_scale + scored.score * (2.0 - weight)
        results.append(
            FrontierScore(
                candidate=candidate,
                strategic_score=scored.score,
                cycling_distance_km=cycling,
                efficiency=efficiency,
                final_score=final,
                breakdown=scored.breakdown,
                hole_id=scored.hole_id,
            )
        )
    return results


# ═══════════════════════════════════════════════════════════════════════════
# 🚴 MAIN LOOP
# ═══════════════════════════════════════════════════════════════════════════


def optimize_orienteering(
    base: Ubersquadrat,
    visited: Iterable[object],
    grid: GridParams,
    max_distance_km: Optional[float] = None,
    routing_weight: Optional[float] = None,
    directions: Optional[Iterable[object]] = None,
    mode: OptimizationMode = OptimizationMode.BALANCED,
    max_hole_size: Optional[int] = None,
    start_point: Optional[Any] = None,
    scoring: Optional[ScoringConfig] = None,
    region: Optional[RegionConfig] = None,
    config: Optional[OrienteeringConfig] = None,
    logger: Optional[logging.Logger] = None,
) -> OptimizationResult:
    """
    Incrementally build a distance-budgeted route of new squares.

    Args:
        base: Übersquadrat in grid index space
        visited: Visited squares (not modified)
        grid: Grid parameters
        max_distance_km: Cycling budget (config default if None)
        routing_weight: 0.5 favours value, 2.0 favours value per km (clamped)
        directions: Selected sides; None or all four disables filtering
        mode: Scoring emphasis
        max_hole_size: Largest hole worth filling
        start_point: Route start; defaults to the Übersquadrat centre
        scoring / region / config: Typed config sections
        logger: Optional logger

    Returns:
        OptimizationResult in route order; stats["total_distance_km"] never
        exceeds max_distance_km.
    """
    scoring = scoring or ScoringConfig()
    region = region or RegionConfig()
    config = config or OrienteeringConfig()
    if max_distance_km is None:
        max_distance_km = config.default_max_distance_km
    if routing_weight is None:
        routing_weight = config.default_routing_weight
    if max_hole_size is None:
        max_hole_size = region.default_max_hole_size

    visited_set = to_visited_set(visited)
    direction_set = normalize_directions(directions)

    if start_point is not None:
        position = to_geo_point(start_point)
        start_source = "user"
    else:
        position = ubersquadrat_center(base, grid)
        start_source = "ubersquadrat-center"
    start = position

    if logger:
        logger.info(
            f"   🚴 Orienteering optimizer: Übersquadrat {base.size_label}, "
            f"budget={max_distance_km}km, routing_weight={routing_weight}, "
            f"mode={mode.value}"
        )
        logger.info(
            f"      Start ({start_source}): ({position.lat:.5f}, {position.lon:.5f})"
        )

    snapshot = analyze_region(
        base,
        visited_set,
        max_hole_size,
        search_radius=region.search_radius,
        max_region_size=region.max_region_size,
        logger=logger,
    )

    local_visited = set(visited_set)
    squares: List[SelectedSquare] = []
    total_distance = 0.0
    iteration = 0
    termination = "budget-exhausted"

    while total_distance < max_distance_km:
        if iteration >= config.max_iterations:
            termination = "iteration-cap"
            break
        iteration += 1

        frontier = find_frontier(
            base,
            local_visited,
            position,
            grid,
            direction_set,
            config,
            first_iteration=iteration == 1,
        )
        if not frontier:
            termination = "no-frontier"
            if logger:
                logger.info(f"      No more frontier squares after {len(squares)} squares")
            break

        scored = score_frontier(
            frontier,
            base,
            snapshot,
            local_visited,
            position,
            grid,
            mode,
            direction_set,
            routing_weight,
            scoring,
            config,
        )
        best = max(scored, key=lambda s: s.final_score)

        if total_distance + best.cycling_distance_km > max_distance_km:
            termination = "budget-exceeded"
            if logger:
                logger.info(
                    f"      Budget reached: {total_distance:.1f} + "
                    f"{best.cycling_distance_km:.1f} > {max_distance_km}km"
                )
            break

        key = best.candidate.key
        squares.append(
            SelectedSquare(
                key=key,
                bounds=rect_from_ij(key.i, key.j, grid),
                score=best.final_score,
                layer_distance=best.candidate.layer_distance,
                edge=best.candidate.edge,
                score_breakdown=dict(
                    best.breakdown,
                    strategic=best.strategic_score,
                    efficiency=best.efficiency,
                ),
                hole_id=best.hole_id,
                cycling_distance_km=best.cycling_distance_km,
            )
        )
        total_distance += best.cycling_distance_km
        position = square_center(key.i, key.j, grid)
        local_visited.add(key)

        if logger and (iteration % 5 == 0 or len(frontier) < 10):
            logger.info(
                f"      Iter {iteration}: added ({key.i},{key.j}), "
                f"distance={total_distance:.1f}km, score={best.final_score:.0f}"
            )

    stats = {
        "iterations": iteration,
        "total_distance_km": total_distance,
        "max_distance_km": max_distance_km,
        "termination_reason": termination,
        "start_point": start.as_dict(),
        "holes": len(snapshot.holes),
        "edges": snapshot.edges_as_dicts(),
    }

    if logger:
        logger.info(
            f"   ✅ Orienteering: {len(squares)} squares, ~{total_distance:.1f}km "
            f"({termination})"
        )

    return OptimizationResult(approach=Approach.ORIENTEERING, squares=squares, stats=stats)
