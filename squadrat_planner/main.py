#!/usr/bin/env python3
"""
Squadrat Planner - Main Entry Point

Recommends the next Squadrat squares to ride around an Übersquadrat and
builds a cycling route through them.

Usage:
    from squadrat_planner.main import run_route_planning
    plan = run_route_planning(request)

    Or, for a run on a synthetic example:
    python -m squadrat_planner.main
"""

import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

# Fix Windows console encoding for emoji support
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

from squadrat_planner.config import CONFIG
from squadrat_planner.config_types import LoggingConfig, PlannerConfig
from squadrat_planner.models.grid_models import GridParams, Ubersquadrat
from squadrat_planner.models.route_models import RoutePlan
from squadrat_planner.routing.route_pipeline import PlanningRequest, plan_route

# ═══════════════════════════════════════════════════════════════════════════
# 🎯 MODULE-LEVEL CONFIG (Single Source of Truth)
# ═══════════════════════════════════════════════════════════════════════════
# Typed PlannerConfig created once at module load time.
PLANNER_CONFIG = PlannerConfig.from_dict(CONFIG)


def setup_logging(
    logging_config: Optional[LoggingConfig] = None,
) -> Tuple[logging.Logger, Optional[Path]]:
    """Configure logging with file and console handlers.

    Returns:
        Tuple of (logger, run_log_folder). run_log_folder is None when file
        logging is disabled.

    Folder naming convention:
        run_{MMDD}_{HHMMSS}, e.g. run_0129_102845
    """
    logging_config = logging_config or PLANNER_CONFIG.logging
    level = getattr(logging, logging_config.level.upper())

    logger = logging.getLogger(logging_config.logger_name)
    logger.setLevel(level)
    logger.handlers.clear()

    run_log_folder: Optional[Path] = None
    if logging_config.log_to_file:
        timestamp = datetime.now().strftime("%m%d_%H%M%S")
        run_log_folder = logging_config.log_path / f"run_{timestamp}"
        run_log_folder.mkdir(parents=True, exist_ok=True)

        fh = logging.FileHandler(run_log_folder / "main.log", encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(fh)

    # Console handler
    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(level)
    ch.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(ch)

    return logger, run_log_folder


# ═══════════════════════════════════════════════════════════════════════════
# 🚴 ROUTE PLANNING
# ═══════════════════════════════════════════════════════════════════════════


def run_route_planning(
    request: PlanningRequest,
    config: Optional[PlannerConfig] = None,
    logger: Optional[logging.Logger] = None,
) -> RoutePlan:
    """Run one planning request with logging and timing."""
    config = config or PLANNER_CONFIG
    if logger is None:
        logger, run_log_folder = setup_logging(config.logging)
        if run_log_folder is not None:
            logger.info(f"   Log folder: {run_log_folder}")

    logger.info("=" * 60)
    logger.info("🎯 Squadrat Route Planner")
    logger.info("=" * 60)
    logger.info(
        f"   Übersquadrat: {request.base.size_label}, visited: {len(request.visited)}, "
        f"roads: {len(request.roads)}"
    )

    start = time.perf_counter()
    try:
        plan = plan_route(request, config=config, logger=logger)
    except Exception as e:
        logger.error(f"❌ Route planning failed: {str(e)}")
        import traceback

        logger.error(traceback.format_exc())
        raise

    elapsed = time.perf_counter() - start
    plan.stats["elapsed_s"] = elapsed
    logger.info(
        f"   ⏱️ Done in {elapsed:.2f}s: {len(plan.optimization)} squares, "
        f"{plan.route.distance_km:.2f}km ({plan.stats.get('termination_reason')})"
    )
    return plan


def _example_request() -> PlanningRequest:
    """A 16×16 Übersquadrat with its inner squares visited and no roads."""
    base = Ubersquadrat(0, 15, 0, 15)
    visited = frozenset(
        (i, j) for i in range(base.min_i, base.max_i + 1) for j in range(base.min_j, base.max_j + 1)
    )
    grid = GridParams(lat_step=0.0113, lon_step=0.0176, origin_lat=50.0, origin_lon=8.0)
    return PlanningRequest(base=base, visited=visited, grid=grid, target_count=8, roundtrip=True)


# ═══════════════════════════════════════════════════════════════════════════
# 🚀 ENTRY POINT
# ═══════════════════════════════════════════════════════════════════════════


if __name__ == "__main__":
    run_route_planning(_example_request())
