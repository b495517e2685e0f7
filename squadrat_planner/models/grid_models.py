"""
Typed data models for grid squares, regions and optimizer output.

Architectural Overview:
=======================
This module contains the immutable value objects that every optimizer call
receives as a complete snapshot: grid parameters, the Übersquadrat, the
visited set and the mode flags. Nothing in the solvers reads ambient state.

Key Interactions:
-----------------
- Input: The application layer builds GridParams, Ubersquadrat and a visited
  set (see solvers/grid_alignment.py for deriving them from polygons)
- Output: Optimizers return OptimizationResult with ordered SelectedSquare
  records; rectangles feed the waypoint optimizer
- Navigation: Use VS Code outline (Ctrl+Shift+O) for quick navigation

Key Design:
-----------
SquareKey is a NamedTuple, so it hashes and compares structurally. This
replaces "i,j" string keys; negative coordinates need no parsing.

MODIFICATION POINT: Add new optimization modes to OptimizationMode here and
a matching entry in CONFIG["scoring"]["mode_multipliers"].
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    Dict,
    FrozenSet,
    Iterable,
    List,
    NamedTuple,
    Optional,
    Tuple,
    Union,
)

# ((south, west), (north, east)) in degrees
Rect = Tuple[Tuple[float, float], Tuple[float, float]]


# ═══════════════════════════════════════════════════════════════════════════
# 🏷️ ENUMS SECTION
# ═══════════════════════════════════════════════════════════════════════════


class Direction(Enum):
    """Side of the Übersquadrat. N grows with i, E grows with j."""

    N = "N"
    S = "S"
    E = "E"
    W = "W"

    @classmethod
    def from_string(cls, s: str) -> "Direction":
        """Convert "N"/"s"/... to Direction.

        Raises:
            ValueError: If s is not one of N, S, E, W
        """
        try:
            return cls(s.strip().upper())
        except ValueError:
            raise ValueError(
                f"direction must be one of N, S, E, W, got {s!r}"
            ) from None


ALL_DIRECTIONS: FrozenSet[Direction] = frozenset(Direction)


class OptimizationMode(Enum):
    """Scoring emphasis: edge expansion, hole filling, or both equally."""

    BALANCED = "balanced"
    EDGE = "edge"
    HOLES = "holes"

    @classmethod
    def from_string(cls, s: Optional[str]) -> "OptimizationMode":
        """Convert string to OptimizationMode, with fallback to BALANCED."""
        for member in cls:
            if s is not None and member.value == s.strip().lower():
                return member
        return cls.BALANCED


class Approach(Enum):
    """Which optimizer the dispatcher routes to."""

    STRATEGIC = "strategic"
    ORIENTEERING = "orienteering"

    @classmethod
    def from_string(cls, s: Optional[str]) -> "Approach":
        """Convert string to Approach, with fallback to STRATEGIC."""
        for member in cls:
            if s is not None and member.value == s.strip().lower():
                return member
        return cls.STRATEGIC


# ═══════════════════════════════════════════════════════════════════════════
# 🔑 SQUARE KEY SECTION
# ═══════════════════════════════════════════════════════════════════════════


class SquareKey(NamedTuple):
    """Integer grid address (i = row / latitude, j = column / longitude)."""

    i: int
    j: int

    def __str__(self) -> str:
        return f"{self.i},{self.j}"

    @classmethod
    def parse(cls, key: str) -> "SquareKey":
        """Parse a legacy "i,j" key string.

        Raises:
            ValueError: If the string is not two comma-separated integers
        """
        parts = key.split(",")
        if len(parts) != 2:
            raise ValueError(f"square key must look like 'i,j', got {key!r}")
        return cls(int(parts[0]), int(parts[1]))

    def neighbors(self) -> Tuple["SquareKey", ...]:
        """4-connected neighbours in S, N, W, E order."""
        i, j = self
        return (
            SquareKey(i - 1, j),
            SquareKey(i + 1, j),
            SquareKey(i, j - 1),
            SquareKey(i, j + 1),
        )


def to_square_key(value: Union["SquareKey", Tuple[int, int], str]) -> SquareKey:
    """Duck-typed conversion of tuples, "i,j" strings and keys to SquareKey."""
    if isinstance(value, SquareKey):
        return value
    if isinstance(value, str):
        return SquareKey.parse(value)
    i, j = value
    return SquareKey(int(i), int(j))


def to_visited_set(
    visited: Iterable[Union[SquareKey, Tuple[int, int], str]],
) -> FrozenSet[SquareKey]:
    """Normalize any collection of square addresses to a frozenset snapshot."""
    return frozenset(to_square_key(v) for v in visited)


# ═══════════════════════════════════════════════════════════════════════════
# 📐 GRID AND REGION SECTION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class GridParams:
    """Implicit grid: square (i, j) spans origin + index × step.

    Attributes:
        lat_step: Square height in degrees latitude
        lon_step: Square width in degrees longitude
        origin_lat: Latitude of the south edge of row 0
        origin_lon: Longitude of the west edge of column 0
    """

    lat_step: float
    lon_step: float
    origin_lat: float
    origin_lon: float

    def __post_init__(self) -> None:
        if self.lat_step <= 0 or self.lon_step <= 0:
            raise ValueError(
                f"grid steps must be > 0, got lat_step={self.lat_step}, "
                f"lon_step={self.lon_step}"
            )

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "GridParams":
        """Create GridParams from a dict with snake_case or camelCase keys."""
        return cls(
            lat_step=d.get("lat_step", d.get("latStep")),
            lon_step=d.get("lon_step", d.get("lonStep")),
            origin_lat=d.get("origin_lat", d.get("originLat")),
            origin_lon=d.get("origin_lon", d.get("originLon")),
        )


@dataclass(frozen=True)
class Ubersquadrat:
    """Axis-aligned base region in grid index space (inclusive bounds)."""

    min_i: int
    max_i: int
    min_j: int
    max_j: int

    def __post_init__(self) -> None:
        if self.min_i > self.max_i or self.min_j > self.max_j:
            raise ValueError(
                f"Übersquadrat bounds must satisfy min <= max, got "
                f"i=[{self.min_i}, {self.max_i}], j=[{self.min_j}, {self.max_j}]"
            )

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Ubersquadrat":
        """Create from {min_i, ...} or the {minI, maxI, minJ, maxJ} form."""
        return cls(
            min_i=int(d.get("min_i", d.get("minI"))),
            max_i=int(d.get("max_i", d.get("maxI"))),
            min_j=int(d.get("min_j", d.get("minJ"))),
            max_j=int(d.get("max_j", d.get("maxJ"))),
        )

    @property
    def height(self) -> int:
        return self.max_i - self.min_i + 1

    @property
    def width(self) -> int:
        return self.max_j - self.min_j + 1

    @property
    def size_label(self) -> str:
        return f"{self.height}×{self.width}"

    def contains(self, i: int, j: int) -> bool:
        return self.min_i <= i <= self.max_i and self.min_j <= j <= self.max_j

    def expanded(self, radius: int) -> "Ubersquadrat":
        """Bounds grown by radius layers on every side."""
        return Ubersquadrat(
            self.min_i - radius,
            self.max_i + radius,
            self.min_j - radius,
            self.max_j + radius,
        )


@dataclass(frozen=True)
class GeoPoint:
    """A WGS84 position in degrees."""

    lat: float
    lon: float

    def as_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lon": self.lon}


# ═══════════════════════════════════════════════════════════════════════════
# 🔍 REGION ANALYSIS RESULTS SECTION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class EdgeAnalysis:
    """Visited statistics of the row/column just outside one side.

    can_expand is True only when every square on that edge is visited, i.e.
    the Übersquadrat is ready to grow in that direction.
    """

    name: Direction
    squares: Tuple[SquareKey, ...]
    total: int
    visited_count: int
    unvisited_count: int
    completion: float
    can_expand: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name.value,
            "total": self.total,
            "visited_count": self.visited_count,
            "unvisited_count": self.unvisited_count,
            "completion": self.completion,
            "can_expand": self.can_expand,
        }


@dataclass(frozen=True)
class Hole:
    """Maximal 4-connected unvisited region inside the search window."""

    id: int
    squares: Tuple[SquareKey, ...]
    size: int
    avg_layer: float


# ═══════════════════════════════════════════════════════════════════════════
# 🎯 CANDIDATE AND RESULT SECTION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Candidate:
    """Unvisited square outside the Übersquadrat.

    Attributes:
        key: Grid address
        edge: Sides the square lies beyond, e.g. "N" or "NE" for a corner
        layer_distance: 0 when touching the border, grows outward
    """

    key: SquareKey
    edge: str
    layer_distance: int


@dataclass(frozen=True)
class ScoredCandidate:
    """Candidate plus its score and the terms that produced it."""

    candidate: Candidate
    score: float
    breakdown: Dict[str, float] = field(default_factory=dict, compare=False)
    hole_id: Optional[int] = None
    vetoed: bool = False

    @property
    def key(self) -> SquareKey:
        return self.candidate.key


@dataclass(frozen=True)
class SelectedSquare:
    """One recommended square, in selection (or route) order."""

    key: SquareKey
    bounds: Rect
    score: float
    layer_distance: int
    edge: str
    score_breakdown: Dict[str, float] = field(default_factory=dict, compare=False)
    hole_id: Optional[int] = None
    cycling_distance_km: Optional[float] = None

    @property
    def grid_coords(self) -> Dict[str, int]:
        return {"i": self.key.i, "j": self.key.j}

    def as_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "grid_coords": self.grid_coords,
            "bounds": [list(self.bounds[0]), list(self.bounds[1])],
            "score": self.score,
            "layer_distance": self.layer_distance,
            "edge": self.edge,
            "score_breakdown": dict(self.score_breakdown),
        }
        if self.hole_id is not None:
            result["hole_id"] = self.hole_id
        if self.cycling_distance_km is not None:
            result["cycling_distance_km"] = self.cycling_distance_km
        return result


@dataclass
class OptimizationResult:
    """Ordered recommendation from either optimizer."""

    approach: Approach
    squares: List[SelectedSquare] = field(default_factory=list)
    stats: Dict[str, Any] = field(default_factory=dict)

    @property
    def rectangles(self) -> List[Rect]:
        return [sq.bounds for sq in self.squares]

    @property
    def keys(self) -> List[SquareKey]:
        return [sq.key for sq in self.squares]

    def __len__(self) -> int:
        return len(self.squares)

    @property
    def is_empty(self) -> bool:
        return not self.squares
