"""
Typed data models for waypoints and routes.

Architectural Overview:
=======================
Waypoints carry provenance (how the point was found on the road network)
so downstream refinement and export can tell a real road crossing from a
square-centre fallback.

Key Interactions:
-----------------
- Input: routing/waypoint_optimizer.py creates Waypoint instances
- Output: routing/route_solver.py orders them into a Route; as_dict()
  feeds the external export and rendering collaborators
- Navigation: Use VS Code outline (Ctrl+Shift+O) for quick navigation
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from squadrat_planner.models.grid_models import GeoPoint, OptimizationResult, SquareKey


# ═══════════════════════════════════════════════════════════════════════════
# 🏷️ ENUMS SECTION
# ═══════════════════════════════════════════════════════════════════════════


class WaypointType(Enum):
    """How a waypoint was placed inside its square."""

    INTERSECTION = "intersection"
    MIDPOINT = "midpoint"
    NEAREST = "nearest"
    CENTER_FALLBACK = "center-fallback"
    NO_ROAD = "no-road"

    @property
    def on_road(self) -> bool:
        return self in (
            WaypointType.INTERSECTION,
            WaypointType.MIDPOINT,
            WaypointType.NEAREST,
        )


# ═══════════════════════════════════════════════════════════════════════════
# 📍 WAYPOINT SECTION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Waypoint:
    """Point where the route crosses a square.

    Attributes:
        lat, lon: Position in degrees
        type: Placement strategy that produced the point
        priority: Candidate tier (higher wins), None for fallbacks
        is_connecting: True if the road also enters the next square in order
        square_index: Index of the square in the list that was placed
        grid_key: Grid address of the square, when known
        alternatives: Next-best candidates, kept for route refinement
    """

    lat: float
    lon: float
    type: WaypointType
    priority: Optional[float] = None
    is_connecting: bool = False
    square_index: int = -1
    grid_key: Optional[SquareKey] = None
    alternatives: Tuple["Waypoint", ...] = field(default=(), compare=False)

    @property
    def has_road(self) -> bool:
        return self.type.on_road

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(self.lat, self.lon)

    def moved_to(self, other: "Waypoint") -> "Waypoint":
        """Take position and provenance of an alternative, keep the square."""
        return replace(
            self,
            lat=other.lat,
            lon=other.lon,
            type=other.type,
            priority=other.priority,
            is_connecting=other.is_connecting,
        )

    def as_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "lat": self.lat,
            "lon": self.lon,
            "type": self.type.value,
            "priority": self.priority,
            "is_connecting": self.is_connecting,
            "square_index": self.square_index,
            "has_road": self.has_road,
        }
        if self.grid_key is not None:
            result["grid_coords"] = {"i": self.grid_key.i, "j": self.grid_key.j}
        if self.alternatives:
            result["alternatives"] = [
                {"lat": a.lat, "lon": a.lon, "type": a.type.value, "priority": a.priority}
                for a in self.alternatives
            ]
        return result


@dataclass
class WaypointStatistics:
    """Counters collected while placing waypoints."""

    total: int = 0
    with_roads: int = 0
    without_roads: int = 0
    intersections: int = 0
    midpoints: int = 0
    nearest: int = 0
    sequence_optimized: int = 0
    connecting_roads: int = 0
    skipped_roads: int = 0

    def record(self, waypoint: Waypoint) -> None:
        if not waypoint.has_road:
            self.without_roads += 1
            return
        self.with_roads += 1
        if waypoint.type is WaypointType.INTERSECTION:
            self.intersections += 1
        elif waypoint.type is WaypointType.MIDPOINT:
            self.midpoints += 1
        else:
            self.nearest += 1
        if waypoint.is_connecting:
            self.connecting_roads += 1

    def to_dict(self) -> Dict[str, int]:
        return dict(self.__dict__)


@dataclass
class WaypointResult:
    """One waypoint per input square, in input order."""

    waypoints: List[Waypoint] = field(default_factory=list)
    skipped_squares: List[int] = field(default_factory=list)
    statistics: WaypointStatistics = field(default_factory=WaypointStatistics)


# ═══════════════════════════════════════════════════════════════════════════
# 🔀 ROUTE SECTION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Route:
    """Ordered route points and total great-circle distance in km."""

    points: Tuple[Any, ...]
    distance_km: float

    def __len__(self) -> int:
        return len(self.points)


@dataclass
class RoutePlan:
    """Everything the pipeline produced for one planning request."""

    optimization: OptimizationResult
    route: Route
    waypoints: WaypointResult = field(default_factory=WaypointResult)
    ordered_square_indices: List[int] = field(default_factory=list)
    stats: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.optimization.is_empty

    def route_as_dicts(self) -> List[Dict[str, float]]:
        return [_point_dict(p) for p in self.route.points]


def _point_dict(p: Any) -> Dict[str, float]:
    return {"lat": float(p.lat), "lon": float(p.lon)}


def waypoints_to_dicts(waypoints: Sequence[Waypoint]) -> List[Dict[str, Any]]:
    """Batch conversion for export collaborators."""
    return [wp.as_dict() for wp in waypoints]
