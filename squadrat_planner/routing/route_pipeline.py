#!/usr/bin/env python3
"""
Squadrat Planner - Route Pipeline

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Orchestrate one planning request, purely over data.

PIPELINE:
1. Select squares               (solvers.optimizer_dispatch.optimize_squares)
2. Initial waypoints            (place_waypoints, order-agnostic)
3. Visit order                  (solve_tsp; orienteering keeps its order)
4. Sequenced waypoints          (place_waypoints_sequenced on ordered squares)
5. Alternative refinement       (refine_waypoints)
6. Final route                  start + waypoints (+ start for roundtrips)

Road features are an input: the caller fetches them for the box given by
calculate_combined_bounds() before calling plan_route(). Turn-by-turn
routing and export happen downstream of the returned RoutePlan.

For Navigation: Use VS Code outline (Ctrl+Shift+O) to jump between sections.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from squadrat_planner.config_types import PlannerConfig
from squadrat_planner.models.grid_models import (
    Approach,
    GridParams,
    OptimizationMode,
    Ubersquadrat,
)
from squadrat_planner.models.route_models import Route, RoutePlan
from squadrat_planner.routing.geodesy import to_geo_point
from squadrat_planner.routing.route_solver import (
    calculate_route_distance,
    refine_waypoints,
    solve_tsp,
)
from squadrat_planner.routing.waypoint_optimizer import (
    place_waypoints,
    place_waypoints_sequenced,
)
from squadrat_planner.solvers.optimizer_dispatch import optimize_squares
from squadrat_planner.solvers.orienteering_optimizer import ubersquadrat_center


@dataclass(frozen=True)
class PlanningRequest:
    """
    Complete input snapshot for one planning call.

    Attributes:
        base: Übersquadrat in grid index space
        visited: Visited squares (SquareKey, (i, j) or "i,j")
        grid: Grid parameters
        roads: Road features in (lon, lat) order
        approach: "strategic" or "orienteering" (or the enum)
        target_count: Strategic only; config default if None
        directions: Selected sides; None means all
        mode: "balanced", "edge" or "holes" (or the enum)
        max_hole_size: Largest hole worth filling
        max_distance_km / routing_weight: Orienteering only
        start_point: Route start; Übersquadrat centre if None
        roundtrip: Return to the start point
    """

    base: Ubersquadrat
    visited: frozenset
    grid: GridParams
    roads: Sequence[Any] = field(default_factory=tuple)
    approach: Any = Approach.STRATEGIC
    target_count: Optional[int] = None
    directions: Optional[Sequence[Any]] = None
    mode: Any = OptimizationMode.BALANCED
    max_hole_size: Optional[int] = None
    max_distance_km: Optional[float] = None
    routing_weight: Optional[float] = None
    start_point: Optional[Any] = None
    roundtrip: bool = False


def _visit_order(waypoints: Sequence[Any], route: Route) -> List[int]:
    """Square indices in the order the solved route visits their waypoints."""
    by_id = {id(wp): wp.square_index for wp in waypoints}
    return [by_id[id(p)] for p in route.points if id(p) in by_id]


def plan_route(
    request: PlanningRequest,
    config: Optional[PlannerConfig] = None,
    logger: Optional[logging.Logger] = None,
) -> RoutePlan:
    """
    Select squares and build the route through them.

    Returns:
        RoutePlan. With no squares the route is just the start point and
        stats["termination_reason"] is "no-candidates".
    """
    config = config or PlannerConfig()

    # ─── 1. square selection ──────────────────────────────────────────────
    optimization = optimize_squares(
        request.base,
        request.visited,
        request.grid,
        approach=request.approach,
        target_count=request.target_count,
        directions=request.directions,
        mode=request.mode,
        max_hole_size=request.max_hole_size,
        max_distance_km=request.max_distance_km,
        routing_weight=request.routing_weight,
        start_point=request.start_point,
        config=config,
        logger=logger,
    )

    start = (
        to_geo_point(request.start_point)
        if request.start_point is not None
        else ubersquadrat_center(request.base, request.grid)
    )

    stats = {
        "approach": optimization.approach.value,
        "squares": len(optimization),
        "optimizer": optimization.stats,
    }

    if optimization.is_empty:
        if logger:
            logger.info("   ⚠️ No squares to route through")
        stats["termination_reason"] = "no-candidates"
        return RoutePlan(
            optimization=optimization,
            route=Route(points=(start,), distance_km=0.0),
            stats=stats,
        )

    squares = optimization.squares
    solver = config.route_solver

    # ─── 2-3. visit order ─────────────────────────────────────────────────
    if optimization.approach is Approach.ORIENTEERING:
        order = list(range(len(squares)))
    else:
        initial = place_waypoints(squares, request.roads, config=config.waypoints, logger=logger)
        tour = solve_tsp(
            initial.waypoints,
            start,
            roundtrip=request.roundtrip,
            optimize=solver.two_opt,
            max_iterations=solver.two_opt_max_iterations,
            epsilon=solver.improvement_epsilon_km,
            logger=logger,
        )
        order = _visit_order(initial.waypoints, tour)
        stats["initial_distance_km"] = tour.distance_km

    ordered_squares = [squares[k] for k in order]

    # ─── 4. sequenced waypoints ───────────────────────────────────────────
    sequenced = place_waypoints_sequenced(
        ordered_squares,
        request.roads,
        start_point=start,
        roundtrip=request.roundtrip,
        config=config.waypoints,
        logger=logger,
    )

    # ─── 5. refinement ────────────────────────────────────────────────────
    waypoints = sequenced.waypoints
    if solver.refine_alternatives:
        waypoints = refine_waypoints(
            waypoints, start=start, roundtrip=request.roundtrip, logger=logger
        )
        sequenced.waypoints = waypoints

    # ─── 6. final route ───────────────────────────────────────────────────
    points = [start, *waypoints]
    if request.roundtrip:
        points.append(start)
    route = Route(points=tuple(points), distance_km=calculate_route_distance(points))

    stats["termination_reason"] = optimization.stats.get("termination_reason")
    stats["waypoints"] = sequenced.statistics.to_dict()
    stats["distance_km"] = route.distance_km

    if logger:
        logger.info(
            f"   ✅ Route: {len(waypoints)} waypoints, {route.distance_km:.2f}km"
            f"{' (roundtrip)' if request.roundtrip else ''}"
        )

    return RoutePlan(
        optimization=optimization,
        route=route,
        waypoints=sequenced,
        ordered_square_indices=order,
        stats=stats,
    )
