"""
═══════════════════════════════════════════════════════════════════════════════
📋 UNIFIED CONFIGURATION TYPES
═══════════════════════════════════════════════════════════════════════════════

ARCHITECTURAL OVERVIEW
----------------------
Responsibility: Typed, validated configuration objects for the planner.
Solver functions never read the CONFIG dictionary; they take one of these
frozen dataclasses, whose defaults equal the CONFIG defaults.

Usage:
    from squadrat_planner.config import CONFIG
    from squadrat_planner.config_types import PlannerConfig

    # Create once at application startup
    planner_config = PlannerConfig.from_dict(CONFIG)

    # Pass the relevant section to each solver
    result = optimize_strategic(..., scoring=planner_config.scoring)

For Navigation: Use VS Code outline (Ctrl+Shift+O)

NAVIGATION GUIDE
----------------
# ═════ 1. SCORING CONFIGURATION
# ═════ 2. REGION CONFIGURATION
# ═════ 3. STRATEGIC CONFIGURATION
# ═════ 4. ORIENTEERING CONFIGURATION
# ═════ 5. WAYPOINT CONFIGURATION
# ═════ 6. ROUTE SOLVER CONFIGURATION
# ═════ 7. LOGGING CONFIGURATION
# ═════ 8. PLANNER CONFIG (MASTER FACADE)

═══════════════════════════════════════════════════════════════════════════════
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Tuple

from squadrat_planner.models.grid_models import OptimizationMode

_DEFAULT_LAYER_BONUS: Tuple[Tuple[int, float], ...] = (
    (0, 10000.0),
    (1, 5000.0),
    (2, 2000.0),
    (3, 500.0),
    (4, -2000.0),
    (5, -10000.0),
)

_DEFAULT_MODE_MULTIPLIERS: Tuple[Tuple[str, float, float], ...] = (
    ("balanced", 1.0, 1.0),
    ("edge", 3.0, 0.3),
    ("holes", 0.3, 2.0),
)


# ═══════════════════════════════════════════════════════════════════════════════
# 🎯 1. SCORING CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ScoringConfig:
    """
    Strategic value weights shared by both optimizers.

    Attributes:
        base_score: Starting score of every candidate.
        layer_bonus: (layer, bonus) pairs sorted by layer. The last pair
            applies to every larger layer distance.
        edge_completion_factor: Edge bonus per percent of edge completion.
        hole_multiplier: Hole bonus per hole square at layers 0-2.
        hole_multiplier_layer3: Hole bonus per hole square at layers 3-4.
        hole_multiplier_layer5: Hole bonus per hole square at layer 5+.
        hole_completion_bonus: Added when the candidate closes its hole.
        mode_multipliers: (mode, edge multiplier, hole multiplier) triples.
        direction_veto: Score for squares outside the selected directions.
    """

    base_score: float = 100.0
    layer_bonus: Tuple[Tuple[int, float], ...] = _DEFAULT_LAYER_BONUS
    edge_completion_factor: float = 5.0
    hole_multiplier: float = 800.0
    hole_multiplier_layer3: float = 400.0
    hole_multiplier_layer5: float = 200.0
    hole_completion_bonus: float = 1500.0
    mode_multipliers: Tuple[Tuple[str, float, float], ...] = _DEFAULT_MODE_MULTIPLIERS
    direction_veto: float = -1000000.0

    def __post_init__(self) -> None:
        if not self.layer_bonus:
            raise ValueError("layer_bonus must define at least one layer")
        layers = [layer for layer, _ in self.layer_bonus]
        if layers != sorted(layers) or layers[0] != 0:
            raise ValueError(
                f"layer_bonus layers must be sorted and start at 0, got {layers}"
            )
        if self.direction_veto >= 0:
            raise ValueError(
                f"direction_veto must be negative, got {self.direction_veto}"
            )
        known = {name for name, _, _ in self.mode_multipliers}
        missing = {m.value for m in OptimizationMode} - known
        if missing:
            raise ValueError(f"mode_multipliers missing modes: {sorted(missing)}")

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ScoringConfig":
        """Create ScoringConfig from CONFIG['scoring'] dictionary."""
        layer_bonus = d.get("layer_bonus")
        modes = d.get("mode_multipliers")
        return cls(
            base_score=d.get("base_score", 100.0),
            layer_bonus=(
                tuple(sorted((int(k), float(v)) for k, v in layer_bonus.items()))
                if layer_bonus
                else _DEFAULT_LAYER_BONUS
            ),
            edge_completion_factor=d.get("edge_completion_factor", 5.0),
            hole_multiplier=d.get("hole_multiplier", 800.0),
            hole_multiplier_layer3=d.get("hole_multiplier_layer3", 400.0),
            hole_multiplier_layer5=d.get("hole_multiplier_layer5", 200.0),
            hole_completion_bonus=d.get("hole_completion_bonus", 1500.0),
            mode_multipliers=(
                tuple(
                    (name, float(m.get("edge", 1.0)), float(m.get("hole", 1.0)))
                    for name, m in modes.items()
                )
                if modes
                else _DEFAULT_MODE_MULTIPLIERS
            ),
            direction_veto=d.get("direction_veto", -1000000.0),
        )

    def layer_score(self, layer: int) -> float:
        """Bonus for a layer distance; beyond the table the last entry holds."""
        score = self.layer_bonus[0][1]
        for threshold, bonus in self.layer_bonus:
            if layer >= threshold:
                score = bonus
        return score

    def hole_multiplier_for(self, layer: int) -> float:
        if layer >= 5:
            return self.hole_multiplier_layer5
        if layer >= 3:
            return self.hole_multiplier_layer3
        return self.hole_multiplier

    def multipliers_for(self, mode: OptimizationMode) -> Tuple[float, float]:
        """(edge multiplier, hole multiplier) for a mode."""
        for name, edge, hole in self.mode_multipliers:
            if name == mode.value:
                return edge, hole
        return 1.0, 1.0


# ═══════════════════════════════════════════════════════════════════════════════
# 🗺️ 2. REGION CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class RegionConfig:
    """Search window and flood fill bounds."""

    search_radius: int = 5
    max_region_size: int = 10000
    default_max_hole_size: int = 5

    def __post_init__(self) -> None:
        if self.search_radius < 1:
            raise ValueError(f"search_radius must be >= 1, got {self.search_radius}")
        if self.max_region_size < 1:
            raise ValueError(
                f"max_region_size must be >= 1, got {self.max_region_size}"
            )
        if self.default_max_hole_size < 1:
            raise ValueError(
                f"default_max_hole_size must be >= 1, got {self.default_max_hole_size}"
            )

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "RegionConfig":
        """Create RegionConfig from CONFIG['region'] dictionary."""
        return cls(
            search_radius=d.get("search_radius", 5),
            max_region_size=d.get("max_region_size", 10000),
            default_max_hole_size=d.get("default_max_hole_size", 5),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 🧭 3. STRATEGIC CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class StrategicConfig:
    """Greedy route-aware selection weights."""

    default_target_count: int = 5
    adjacency_bonus: float = 25.0
    distance_penalty: float = 100.0
    hole_continuation_bonus: float = 1500.0

    def __post_init__(self) -> None:
        if self.default_target_count < 0:
            raise ValueError(
                f"default_target_count must be >= 0, got {self.default_target_count}"
            )
        if self.distance_penalty < 0:
            raise ValueError(
                f"distance_penalty must be >= 0, got {self.distance_penalty}"
            )

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "StrategicConfig":
        """Create StrategicConfig from CONFIG['strategic'] dictionary."""
        return cls(
            default_target_count=d.get("default_target_count", 5),
            adjacency_bonus=d.get("adjacency_bonus", 25.0),
            distance_penalty=d.get("distance_penalty", 100.0),
            hole_continuation_bonus=d.get("hole_continuation_bonus", 1500.0),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 🚴 4. ORIENTEERING CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class OrienteeringConfig:
    """
    Distance-budgeted incremental route building.

    Attributes:
        default_max_distance_km: Budget when the caller gives none.
        default_routing_weight: Efficiency vs. value blend when none is given.
        routing_weight_min / routing_weight_max: Clamp range for the weight.
        efficiency_scale: Multiplier of the efficiency term.
        road_factor: Cycling distance / straight-line distance estimate.
        max_gap_km: Frontier reach from the current route position.
        first_gap_multiplier: Reach multiplier on the first iteration only.
        frontier_max_layer: Largest layer distance eligible for the frontier.
        adjacency_bonus: Per visited neighbour, rewards route continuity.
        max_iterations: Runaway guard for the incremental loop.
    """

    default_max_distance_km: float = 50.0
    default_routing_weight: float = 1.0
    routing_weight_min: float = 0.5
    routing_weight_max: float = 2.0
    efficiency_scale: float = 1000.0
    road_factor: float = 1.4
    max_gap_km: float = 10.0
    first_gap_multiplier: float = 3.0
    frontier_max_layer: int = 2
    adjacency_bonus: float = 100.0
    max_iterations: int = 100

    def __post_init__(self) -> None:
        if self.road_factor < 1.0:
            raise ValueError(f"road_factor must be >= 1.0, got {self.road_factor}")
        if self.routing_weight_min > self.routing_weight_max:
            raise ValueError(
                f"routing_weight_min ({self.routing_weight_min}) must be <= "
                f"routing_weight_max ({self.routing_weight_max})"
            )
        if self.max_gap_km <= 0:
            raise ValueError(f"max_gap_km must be > 0, got {self.max_gap_km}")
        if self.max_iterations < 1:
            raise ValueError(
                f"max_iterations must be >= 1, got {self.max_iterations}"
            )
        if self.frontier_max_layer < 0:
            raise ValueError(
                f"frontier_max_layer must be >= 0, got {self.frontier_max_layer}"
            )

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "OrienteeringConfig":
        """Create OrienteeringConfig from CONFIG['orienteering'] dictionary."""
        return cls(
            default_max_distance_km=d.get("default_max_distance_km", 50.0),
            default_routing_weight=d.get("default_routing_weight", 1.0),
            routing_weight_min=d.get("routing_weight_min", 0.5),
            routing_weight_max=d.get("routing_weight_max", 2.0),
            efficiency_scale=d.get("efficiency_scale", 1000.0),
            road_factor=d.get("road_factor", 1.4),
            max_gap_km=d.get("max_gap_km", 10.0),
            first_gap_multiplier=d.get("first_gap_multiplier", 3.0),
            frontier_max_layer=d.get("frontier_max_layer", 2),
            adjacency_bonus=d.get("adjacency_bonus", 100.0),
            max_iterations=d.get("max_iterations", 100),
        )

    def clamp_weight(self, weight: float) -> float:
        return min(self.routing_weight_max, max(self.routing_weight_min, weight))


# ═══════════════════════════════════════════════════════════════════════════════
# 📍 5. WAYPOINT CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class WaypointConfig:
    """Candidate priorities as (plain, connecting) pairs."""

    intersection_priority: Tuple[float, float] = (3.0, 5.0)
    midpoint_priority: Tuple[float, float] = (2.0, 4.0)
    nearest_priority: Tuple[float, float] = (1.0, 3.5)
    n_alternatives: int = 2
    road_bounds_buffer_deg: float = 0.01
    debug_candidates: bool = False

    def __post_init__(self) -> None:
        if self.n_alternatives < 0:
            raise ValueError(
                f"n_alternatives must be >= 0, got {self.n_alternatives}"
            )
        for name in ("intersection_priority", "midpoint_priority", "nearest_priority"):
            if len(getattr(self, name)) != 2:
                raise ValueError(f"{name} must be a (plain, connecting) pair")

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WaypointConfig":
        """Create WaypointConfig from CONFIG['waypoints'] dictionary."""
        priorities = d.get("priorities", {})
        return cls(
            intersection_priority=tuple(priorities.get("intersection", (3.0, 5.0))),
            midpoint_priority=tuple(priorities.get("midpoint", (2.0, 4.0))),
            nearest_priority=tuple(priorities.get("nearest", (1.0, 3.5))),
            n_alternatives=d.get("n_alternatives", 2),
            road_bounds_buffer_deg=d.get("road_bounds_buffer_deg", 0.01),
            debug_candidates=d.get("debug_candidates", False),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 🔀 6. ROUTE SOLVER CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class RouteSolverConfig:
    """Nearest neighbour + 2-opt settings."""

    two_opt: bool = True
    two_opt_max_iterations: int = 100
    improvement_epsilon_km: float = 1e-9
    refine_alternatives: bool = True

    def __post_init__(self) -> None:
        if self.two_opt_max_iterations < 0:
            raise ValueError(
                f"two_opt_max_iterations must be >= 0, got {self.two_opt_max_iterations}"
            )

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "RouteSolverConfig":
        """Create RouteSolverConfig from CONFIG['route_solver'] dictionary."""
        return cls(
            two_opt=d.get("two_opt", True),
            two_opt_max_iterations=d.get("two_opt_max_iterations", 100),
            improvement_epsilon_km=d.get("improvement_epsilon_km", 1e-9),
            refine_alternatives=d.get("refine_alternatives", True),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 📋 7. LOGGING CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class LoggingConfig:
    """Logger name, level and run-log folder."""

    logger_name: str = "SquadratPlanner"
    level: str = "INFO"
    log_dir: str = "logs"
    log_to_file: bool = True

    def __post_init__(self) -> None:
        valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        if self.level.upper() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got '{self.level}'")

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "LoggingConfig":
        """Create LoggingConfig from CONFIG['logging'] dictionary."""
        return cls(
            logger_name=d.get("logger_name", "SquadratPlanner"),
            level=d.get("level", "INFO"),
            log_dir=d.get("log_dir", "logs"),
            log_to_file=d.get("log_to_file", True),
        )

    @property
    def log_path(self) -> Path:
        """Get log directory as relative Path object."""
        return Path(self.log_dir)


# ═══════════════════════════════════════════════════════════════════════════════
# 🎛️ 8. PLANNER CONFIG (MASTER FACADE)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class PlannerConfig:
    """
    Master configuration object for the planner.

    Create it once with PlannerConfig.from_dict(CONFIG) and pass it (or one
    of its sections) to the functions that need settings.

    Example:
        from squadrat_planner.config import CONFIG
        from squadrat_planner.config_types import PlannerConfig

        planner_config = PlannerConfig.from_dict(CONFIG)
        plan = plan_route(request, planner_config)
    """

    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    region: RegionConfig = field(default_factory=RegionConfig)
    strategic: StrategicConfig = field(default_factory=StrategicConfig)
    orienteering: OrienteeringConfig = field(default_factory=OrienteeringConfig)
    waypoints: WaypointConfig = field(default_factory=WaypointConfig)
    route_solver: RouteSolverConfig = field(default_factory=RouteSolverConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "PlannerConfig":
        """
        Create PlannerConfig from the CONFIG dictionary.

        Missing sections fall back to the dataclass defaults.
        """
        return cls(
            scoring=ScoringConfig.from_dict(config_dict.get("scoring", {})),
            region=RegionConfig.from_dict(config_dict.get("region", {})),
            strategic=StrategicConfig.from_dict(config_dict.get("strategic", {})),
            orienteering=OrienteeringConfig.from_dict(
                config_dict.get("orienteering", {})
            ),
            waypoints=WaypointConfig.from_dict(config_dict.get("waypoints", {})),
            route_solver=RouteSolverConfig.from_dict(
                config_dict.get("route_solver", {})
            ),
            logging=LoggingConfig.from_dict(config_dict.get("logging", {})),
        )
