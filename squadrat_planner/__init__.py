"""
Squadrat Planner

Square-selection optimizer and cycling route pipeline for growing a
Squadrat Übersquadrat.
"""

from squadrat_planner.main import run_route_planning
from squadrat_planner.config import CONFIG
from squadrat_planner.routing.route_pipeline import PlanningRequest, plan_route
from squadrat_planner.solvers.optimizer_dispatch import optimize_squares

__all__ = [
    "run_route_planning",
    "CONFIG",
    "PlanningRequest",
    "plan_route",
    "optimize_squares",
]
