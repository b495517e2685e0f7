"""Data models package for typed grid, optimizer and route structures."""

from .grid_models import (
    ALL_DIRECTIONS,
    Approach,
    Candidate,
    Direction,
    EdgeAnalysis,
    GeoPoint,
    GridParams,
    Hole,
    OptimizationMode,
    OptimizationResult,
    Rect,
    ScoredCandidate,
    SelectedSquare,
    SquareKey,
    Ubersquadrat,
    # Boundary conversion utilities
    to_square_key,
    to_visited_set,
)

from .route_models import (
    Route,
    RoutePlan,
    Waypoint,
    WaypointResult,
    WaypointStatistics,
    WaypointType,
    waypoints_to_dicts,
)

__all__ = [
    # Grid models
    "ALL_DIRECTIONS",
    "Approach",
    "Candidate",
    "Direction",
    "EdgeAnalysis",
    "GeoPoint",
    "GridParams",
    "Hole",
    "OptimizationMode",
    "OptimizationResult",
    "Rect",
    "ScoredCandidate",
    "SelectedSquare",
    "SquareKey",
    "Ubersquadrat",
    "to_square_key",
    "to_visited_set",
    # Route models
    "Route",
    "RoutePlan",
    "Waypoint",
    "WaypointResult",
    "WaypointStatistics",
    "WaypointType",
    "waypoints_to_dicts",
]
