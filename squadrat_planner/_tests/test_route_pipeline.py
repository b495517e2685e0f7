#!/usr/bin/env python3
"""
Integration tests for plan_route() and run_route_planning().

Tests:
1. Strategic plan: TSP order, sequenced waypoints, closed roundtrip
2. Orienteering plan keeps construction order
3. Empty selection yields a start-only route
4. Logging setup and entry point

Run with: python -m pytest squadrat_planner/_tests/test_route_pipeline.py -v
"""

import logging

import pytest

from squadrat_planner.config_types import LoggingConfig, PlannerConfig, RouteSolverConfig
from squadrat_planner.main import run_route_planning, setup_logging
from squadrat_planner.models.grid_models import Approach, GeoPoint, GridParams, Ubersquadrat
from squadrat_planner.models.route_models import WaypointType
from squadrat_planner.routing.route_pipeline import PlanningRequest, plan_route
from squadrat_planner.routing.route_solver import calculate_route_distance
from squadrat_planner.solvers.grid_geometry import iter_window
from squadrat_planner.solvers.orienteering_optimizer import ubersquadrat_center


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def base():
    return Ubersquadrat(0, 3, 0, 3)


@pytest.fixture
def grid():
    return GridParams(lat_step=0.01, lon_step=0.015, origin_lat=50.0, origin_lon=8.0)


@pytest.fixture
def interior(base):
    return frozenset(iter_window(base))


@pytest.fixture
def border_road():
    """East-west road through the row just north of the Übersquadrat."""
    return {
        "type": "LineString",
        "coordinates": [[7.95, 50.045], [8.10, 50.045]],
    }


@pytest.fixture
def quiet_logger():
    logger = logging.getLogger("SquadratPlannerTest")
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    return logger


# ============================================================================
# PLAN ROUTE
# ============================================================================


class TestPlanRouteStrategic:
    def test_roundtrip_plan(self, base, grid, interior):
        request = PlanningRequest(
            base=base, visited=interior, grid=grid, target_count=5, roundtrip=True
        )
        plan = plan_route(request)
        start = ubersquadrat_center(base, grid)

        assert len(plan.optimization) == 5
        assert sorted(plan.ordered_square_indices) == list(range(5))
        assert plan.route.points[0] == start
        assert plan.route.points[-1] == start
        assert len(plan.route) == 7
        assert plan.route.distance_km == pytest.approx(
            calculate_route_distance(plan.route.points)
        )
        assert plan.stats["termination_reason"] == "target-reached"
        assert plan.stats["initial_distance_km"] > 0

    def test_waypoints_follow_visit_order(self, base, grid, interior):
        plan = plan_route(PlanningRequest(base=base, visited=interior, grid=grid))
        keys = plan.optimization.keys
        expected = [keys[k] for k in plan.ordered_square_indices]
        assert [w.grid_key for w in plan.waypoints.waypoints] == expected
        assert all(w.type is WaypointType.NO_ROAD for w in plan.waypoints.waypoints)

    def test_roads_produce_road_waypoints(self, base, grid, interior, border_road):
        request = PlanningRequest(
            base=base, visited=interior, grid=grid, roads=[border_road],
            directions=["N"], target_count=3,
        )
        plan = plan_route(request)
        on_road = [w for w in plan.waypoints.waypoints if w.has_road]
        assert on_road
        for waypoint in on_road:
            assert waypoint.lat == pytest.approx(50.045, abs=1e-6)
        assert plan.stats["waypoints"]["with_roads"] == len(on_road)

    def test_custom_start_point(self, base, grid, interior):
        request = PlanningRequest(
            base=base, visited=interior, grid=grid, start_point={"lat": 50.0, "lon": 8.0}
        )
        plan = plan_route(request)
        assert plan.route.points[0] == GeoPoint(50.0, 8.0)

    def test_without_two_opt_or_refinement(self, base, grid, interior):
        config = PlannerConfig(
            route_solver=RouteSolverConfig(two_opt=False, refine_alternatives=False)
        )
        plan = plan_route(PlanningRequest(base=base, visited=interior, grid=grid), config)
        assert len(plan.waypoints.waypoints) == len(plan.optimization)


class TestPlanRouteOrienteering:
    def test_keeps_construction_order(self, base, grid, interior):
        request = PlanningRequest(
            base=base, visited=interior, grid=grid,
            approach="orienteering", max_distance_km=15.0,
        )
        plan = plan_route(request)
        assert plan.optimization.approach is Approach.ORIENTEERING
        assert plan.ordered_square_indices == list(range(len(plan.optimization)))
        assert plan.stats["optimizer"]["total_distance_km"] <= 15.0


class TestPlanRouteEmpty:
    def test_no_candidates(self, base, grid):
        visited = frozenset(iter_window(base.expanded(5)))
        plan = plan_route(PlanningRequest(base=base, visited=visited, grid=grid))
        assert plan.is_empty
        assert plan.route.points == (ubersquadrat_center(base, grid),)
        assert plan.route.distance_km == 0.0
        assert plan.stats["termination_reason"] == "no-candidates"
        assert plan.route_as_dicts() == [{"lat": pytest.approx(50.02), "lon": pytest.approx(8.03)}]


# ============================================================================
# ENTRY POINT
# ============================================================================


class TestMain:
    def test_setup_logging_console_only(self):
        logger, folder = setup_logging(LoggingConfig(logger_name="SquadratPlannerConsole", log_to_file=False))
        assert folder is None
        assert len(logger.handlers) == 1

    def test_setup_logging_with_file(self, tmp_path):
        config = LoggingConfig(logger_name="SquadratPlannerFile", log_dir=str(tmp_path))
        logger, folder = setup_logging(config)
        logger.info("hello")
        for handler in logger.handlers:
            handler.flush()
        assert folder.parent == tmp_path
        assert folder.name.startswith("run_")
        assert "hello" in (folder / "main.log").read_text(encoding="utf-8")
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()

    def test_run_route_planning(self, base, grid, interior, quiet_logger):
        request = PlanningRequest(base=base, visited=interior, grid=grid, target_count=3)
        plan = run_route_planning(request, logger=quiet_logger)
        assert len(plan.optimization) == 3
        assert plan.stats["elapsed_s"] >= 0

    def test_run_route_planning_reraises(self, grid, quiet_logger):
        request = PlanningRequest(
            base=Ubersquadrat(0, 3, 0, 3), visited=frozenset(), grid=grid, directions=["Q"]
        )
        with pytest.raises(ValueError):
            run_route_planning(request, logger=quiet_logger)
