"""
═══════════════════════════════════════════════════════════════════════════════
📦 SOLVERS PACKAGE
═══════════════════════════════════════════════════════════════════════════════

This package contains the square-selection components:

Modules:
- grid_geometry: (i, j) ↔ lat/lon rectangles, layer distance, border ring
- grid_alignment: Grid parameters and visited set from polygon rings
- region_analysis: Edge completion and hole detection (BFS flood fill)
- scoring: Candidate enumeration and shared strategic scoring
- strategic_optimizer: Batch scoring + greedy route-aware selection
- orienteering_optimizer: Distance-budgeted incremental route building
- optimizer_dispatch: Single entry point selecting one of the two

Public API:
- optimize_squares: Main entry point for square selection
- optimize_strategic, optimize_orienteering: The optimizers themselves
- scored_candidates: Every perimeter candidate with its score breakdown
- select_ubersquadrat_polygon, grid_params_from_ubersquadrat,
  square_from_point, visited_set_from_polygons: Grid and visited set from
  parsed polygon rings

Usage:
    from squadrat_planner.solvers import optimize_squares

    result = optimize_squares(base, visited, grid, approach="orienteering",
                              max_distance_km=40)
    rectangles = result.rectangles

═══════════════════════════════════════════════════════════════════════════════
"""

from squadrat_planner.solvers.grid_alignment import (
    grid_params_from_ubersquadrat,
    select_ubersquadrat_polygon,
    square_from_point,
    visited_set_from_polygons,
)
from squadrat_planner.solvers.optimizer_dispatch import optimize_squares
from squadrat_planner.solvers.orienteering_optimizer import optimize_orienteering
from squadrat_planner.solvers.strategic_optimizer import optimize_strategic, scored_candidates

__all__ = [
    "optimize_squares",
    "optimize_orienteering",
    "optimize_strategic",
    "scored_candidates",
    "select_ubersquadrat_polygon",
    "grid_params_from_ubersquadrat",
    "square_from_point",
    "visited_set_from_polygons",
]
