"""
═══════════════════════════════════════════════════════════════════════════════
📦 ROUTING PACKAGE
═══════════════════════════════════════════════════════════════════════════════

Modules:
- geodesy: Great-circle distance, midpoint and distance matrix (pyproj)
- waypoint_optimizer: Road-aware waypoint per square (shapely)
- route_solver: Nearest neighbour, 2-opt, alternative refinement
- route_pipeline: plan_route() orchestration (import it directly; it
  depends on the solvers package, which itself uses geodesy)

═══════════════════════════════════════════════════════════════════════════════
"""

from squadrat_planner.routing.geodesy import distance_km, midpoint
from squadrat_planner.routing.route_solver import (
    calculate_route_distance,
    nearest_neighbor,
    refine_waypoints,
    solve_tsp,
    two_opt_optimize,
)
from squadrat_planner.routing.waypoint_optimizer import (
    calculate_combined_bounds,
    place_waypoints,
    place_waypoints_sequenced,
)

__all__ = [
    "distance_km",
    "midpoint",
    "calculate_route_distance",
    "nearest_neighbor",
    "refine_waypoints",
    "solve_tsp",
    "two_opt_optimize",
    "calculate_combined_bounds",
    "place_waypoints",
    "place_waypoints_sequenced",
]
