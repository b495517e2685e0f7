#!/usr/bin/env python3
"""
Squadrat Planner - Configuration

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Centralized configuration for square selection and routing.
Single source of truth for scoring weights, search bounds, orienteering
budget handling, waypoint priorities and route solver limits.

Configuration Sections (ordered by importance for algorithm tuning):
1. scoring: Layer schedule, mode multipliers, hole and adjacency bonuses
2. region: Search window radius and flood fill guard
3. strategic: Greedy route-aware selection weights
4. orienteering: Distance budget, road factor, frontier limits
5. waypoints: Candidate priorities and alternatives
6. route_solver: 2-opt limits
7. logging: Log folder and level (bottom - rarely changed)

Navigation Guide:
- Use VS Code outline (Ctrl+Shift+O) to jump between sections
"""

import os
from typing import Dict, Any, TypeVar, Callable, Optional

T = TypeVar("T")


def _env_or_default(
    key: str, default: T, type_fn: Optional[Callable[[str], T]] = None
) -> T:
    """
    Get value from environment variable or use default.

    Args:
        key: Environment variable name (e.g., "SQUADRAT_ROAD_FACTOR")
        default: Default value if env var not set
        type_fn: Optional type conversion function (e.g., float, int)

    Returns:
        Value from environment (converted) or default

    Example:
        >>> _env_or_default("SQUADRAT_ROAD_FACTOR", 1.4, float)
        1.4  # If env var not set
    """
    val = os.getenv(key)
    if val is not None:
        if type_fn is not None:
            return type_fn(val)
        return val  # type: ignore
    return default


def _env_bool(key: str, default: bool) -> bool:
    """
    Get boolean value from environment variable.

    Treats "true", "1", "yes" as True (case-insensitive).
    Any other value or unset returns default.
    """
    val = os.getenv(key)
    if val is None:
        return default
    return val.lower() in ("true", "1", "yes")


# ═══════════════════════════════════════════════════════════════════════════
# 🔧 ENVIRONMENT VARIABLE OVERRIDES
# ═══════════════════════════════════════════════════════════════════════════
# These settings can be overridden via environment variables:
#
# SQUADRAT_ROAD_FACTOR        - float, cycling/straight-line ratio (default: 1.4)
# SQUADRAT_MAX_GAP_KM         - float, max frontier distance from route (default: 10)
# SQUADRAT_MAX_ITERATIONS     - int, orienteering loop cap (default: 100)
# SQUADRAT_TWO_OPT_MAX_ITER   - int, 2-opt pass cap (default: 100)
# SQUADRAT_DEBUG_WAYPOINTS    - "true" or "false" (default: "false")
# SQUADRAT_LOG_LEVEL          - "DEBUG" | "INFO" | "WARNING" (default: "INFO")
# SQUADRAT_LOG_DIR            - folder for run logs (default: "logs")
#
# Example usage:
#   export SQUADRAT_ROAD_FACTOR=1.3
#   export SQUADRAT_DEBUG_WAYPOINTS=true
#   python -m squadrat_planner.main
# ═══════════════════════════════════════════════════════════════════════════

# ═══════════════════════════════════════════════════════════════════════════
# ⚙️ MASTER CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════

CONFIG: Dict[str, Any] = {
    # ═══════════════════════════════════════════════════════════════════════
    # 🎯 SCORING (shared by strategic and orienteering optimizers)
    # ═══════════════════════════════════════════════════════════════════════
    "scoring": {
        # Every candidate starts from this score
        "base_score": 100,
        # Layer distance schedule. Keys are layer distances, the last entry
        # applies to every larger layer. Dominates all other terms.
        "layer_bonus": {0: 10000, 1: 5000, 2: 2000, 3: 500, 4: -2000, 5: -10000},
        # Edge bonus = floor(max completion % of touched edges × factor)
        "edge_completion_factor": 5,
        # Hole bonus = hole size × multiplier (reduced for distant layers)
        "hole_multiplier": 800,
        "hole_multiplier_layer3": 400,
        "hole_multiplier_layer5": 200,
        # Added when the candidate is the last unvisited square of its hole
        "hole_completion_bonus": 1500,
        # Multipliers per optimization mode: (edge term, hole term)
        "mode_multipliers": {
            "balanced": {"edge": 1.0, "hole": 1.0},
            "edge": {"edge": 3.0, "hole": 0.3},
            "holes": {"edge": 0.3, "hole": 2.0},
        },
        # Hard veto for squares outside every selected direction
        "direction_veto": -1000000,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🗺️ REGION ANALYSIS
    # ═══════════════════════════════════════════════════════════════════════
    "region": {
        # Layers around the Übersquadrat scanned for candidates and holes
        "search_radius": 5,
        # Flood fill guard: a single region never grows past this many squares
        # (the search window bounds it anyway, this makes the bound explicit)
        "max_region_size": 10000,
        # Holes larger than this are "wilderness" and ignored (UI range 1-20)
        "default_max_hole_size": 5,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🧭 STRATEGIC OPTIMIZER
    # ═══════════════════════════════════════════════════════════════════════
    "strategic": {
        "default_target_count": 5,
        # Adjacency bonus per visited 4-neighbour
        "adjacency_bonus": 25,
        # Route score penalty per Manhattan step from the last selected square
        "distance_penalty": 100,
        # Bonus for continuing a hole another selected square already started
        "hole_continuation_bonus": 1500,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🚴 ORIENTEERING OPTIMIZER
    # ═══════════════════════════════════════════════════════════════════════
    "orienteering": {
        "default_max_distance_km": 50.0,
        "default_routing_weight": 1.0,
        # Routing weight is clamped into this range
        "routing_weight_min": 0.5,
        "routing_weight_max": 2.0,
        # Efficiency term scale in the final score blend
        "efficiency_scale": 1000.0,
        # Cycling distance ≈ straight line × road factor
        # ENV OVERRIDE: SQUADRAT_ROAD_FACTOR (float, default: 1.4)
        "road_factor": _env_or_default("SQUADRAT_ROAD_FACTOR", 1.4, float),
        # Frontier squares must be within this distance of the route position
        # ENV OVERRIDE: SQUADRAT_MAX_GAP_KM (float, default: 10.0)
        "max_gap_km": _env_or_default("SQUADRAT_MAX_GAP_KM", 10.0, float),
        # First iteration allows max_gap_km × this factor to find a frontier
        "first_gap_multiplier": 3.0,
        # Frontier = unvisited squares up to this layer distance
        "frontier_max_layer": 2,
        # Higher than strategic mode: rewards route continuity
        "adjacency_bonus": 100,
        # Runaway guard for the incremental loop
        # ENV OVERRIDE: SQUADRAT_MAX_ITERATIONS (int, default: 100)
        "max_iterations": _env_or_default("SQUADRAT_MAX_ITERATIONS", 100, int),
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 📍 WAYPOINT OPTIMIZER
    # ═══════════════════════════════════════════════════════════════════════
    "waypoints": {
        # Candidate priorities: (plain, on a road connecting to next square)
        "priorities": {
            "intersection": [3.0, 5.0],
            "midpoint": [2.0, 4.0],
            "nearest": [1.0, 3.5],
        },
        # Alternatives kept next to the primary waypoint for refinement
        "n_alternatives": 2,
        # Padding around the squares when asking for road data (~1 km)
        "road_bounds_buffer_deg": 0.01,
        # Log every candidate per square at DEBUG level
        # ENV OVERRIDE: SQUADRAT_DEBUG_WAYPOINTS (bool, default: false)
        "debug_candidates": _env_bool("SQUADRAT_DEBUG_WAYPOINTS", False),
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🔀 ROUTE SOLVER
    # ═══════════════════════════════════════════════════════════════════════
    "route_solver": {
        "two_opt": True,
        # ENV OVERRIDE: SQUADRAT_TWO_OPT_MAX_ITER (int, default: 100)
        "two_opt_max_iterations": _env_or_default(
            "SQUADRAT_TWO_OPT_MAX_ITER", 100, int
        ),
        # Minimum gain (km) for a 2-opt move to count as an improvement
        "improvement_epsilon_km": 1e-9,
        "refine_alternatives": True,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 📋 LOGGING
    # ═══════════════════════════════════════════════════════════════════════
    "logging": {
        "logger_name": "SquadratPlanner",
        "level": _env_or_default("SQUADRAT_LOG_LEVEL", "INFO"),
        "log_dir": _env_or_default("SQUADRAT_LOG_DIR", "logs"),
        "log_to_file": True,
    },
}
