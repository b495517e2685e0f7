#!/usr/bin/env python3
"""
Squadrat Planner - Optimizer Dispatch

Single entry point that routes to the strategic or orienteering optimizer.
Strings from the UI layer are normalized to enums here; unknown approaches
fall back to strategic and unknown modes to balanced.
"""

import logging
from typing import Any, Iterable, Optional, Union

from squadrat_planner.config_types import PlannerConfig
from squadrat_planner.models.grid_models import (
    Approach,
    GridParams,
    OptimizationMode,
    OptimizationResult,
    Ubersquadrat,
)
from squadrat_planner.solvers.orienteering_optimizer import optimize_orienteering
from squadrat_planner.solvers.strategic_optimizer import optimize_strategic


def _as_approach(value: Union[Approach, str, None]) -> Approach:
    return value if isinstance(value, Approach) else Approach.from_string(value)


def _as_mode(value: Union[OptimizationMode, str, None]) -> OptimizationMode:
    return value if isinstance(value, OptimizationMode) else OptimizationMode.from_string(value)


def optimize_squares(
    base: Ubersquadrat,
    visited: Iterable[object],
    grid: GridParams,
    approach: Union[Approach, str, None] = Approach.STRATEGIC,
    target_count: Optional[int] = None,
    directions: Optional[Iterable[object]] = None,
    mode: Union[OptimizationMode, str, None] = OptimizationMode.BALANCED,
    max_hole_size: Optional[int] = None,
    max_distance_km: Optional[float] = None,
    routing_weight: Optional[float] = None,
    start_point: Optional[Any] = None,
    config: Optional[PlannerConfig] = None,
    logger: Optional[logging.Logger] = None,
) -> OptimizationResult:
    """
    Run the optimizer selected by approach.

    target_count only applies to strategic; max_distance_km, routing_weight
    and start_point only apply to orienteering. Missing values take the
    config defaults.
    """
    config = config or PlannerConfig()
    chosen = _as_approach(approach)
    opt_mode = _as_mode(mode)

    if chosen is Approach.ORIENTEERING:
        return optimize_orienteering(
            base,
            visited,
            grid,
            max_distance_km=max_distance_km,
            routing_weight=routing_weight,
            directions=directions,
            mode=opt_mode,
            max_hole_size=max_hole_size,
            start_point=start_point,
            scoring=config.scoring,
            region=config.region,
            config=config.orienteering,
            logger=logger,
        )

    if target_count is None:
        target_count = config.strategic.default_target_count
    return optimize_strategic(
        base,
        target_count,
        directions,
        visited,
        grid,
        mode=opt_mode,
        max_hole_size=max_hole_size,
        scoring=config.scoring,
        region=config.region,
        strategic=config.strategic,
        logger=logger,
    )
