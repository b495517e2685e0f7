#!/usr/bin/env python3
"""
Unit tests for CONFIG, the typed config objects and the value models.

Tests:
1. PlannerConfig.from_dict(CONFIG) mirrors the dataclass defaults
2. __post_init__ validation raises ValueError
3. Scoring helpers (layer schedule, hole multipliers, mode multipliers)
4. SquareKey parsing and enum factories
5. Export dicts of squares and waypoints

Run with: python -m pytest squadrat_planner/_tests/test_config_types.py -v
"""

import pytest

from squadrat_planner.config import CONFIG, _env_bool, _env_or_default
from squadrat_planner.config_types import (
    LoggingConfig,
    OrienteeringConfig,
    PlannerConfig,
    RegionConfig,
    ScoringConfig,
    WaypointConfig,
)
from squadrat_planner.models.grid_models import (
    Approach,
    Direction,
    GridParams,
    OptimizationMode,
    SelectedSquare,
    SquareKey,
    Ubersquadrat,
    to_visited_set,
)
from squadrat_planner.models.route_models import Waypoint, WaypointType, waypoints_to_dicts


class TestPlannerConfig:
    """CONFIG dict → typed config."""

    def test_from_config_dict(self):
        config = PlannerConfig.from_dict(CONFIG)
        assert config.scoring.layer_bonus == ScoringConfig().layer_bonus
        assert config.scoring.mode_multipliers == ScoringConfig().mode_multipliers
        assert config.region == RegionConfig()
        assert config.strategic.adjacency_bonus == 25
        assert config.orienteering.adjacency_bonus == 100
        assert config.waypoints.intersection_priority == (3.0, 5.0)
        assert config.logging.logger_name == "SquadratPlanner"

    def test_missing_sections_use_defaults(self):
        assert PlannerConfig.from_dict({}) == PlannerConfig()

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("SQUADRAT_TEST_FACTOR", "1.3")
        monkeypatch.setenv("SQUADRAT_TEST_FLAG", "Yes")
        assert _env_or_default("SQUADRAT_TEST_FACTOR", 1.4, float) == 1.3
        assert _env_or_default("SQUADRAT_TEST_UNSET", 1.4, float) == 1.4
        assert _env_bool("SQUADRAT_TEST_FLAG", False) is True
        assert _env_bool("SQUADRAT_TEST_UNSET", True) is True


class TestValidation:
    def test_scoring(self):
        with pytest.raises(ValueError):
            ScoringConfig(direction_veto=10.0)
        with pytest.raises(ValueError):
            ScoringConfig(layer_bonus=((1, 100.0),))
        with pytest.raises(ValueError):
            ScoringConfig(mode_multipliers=(("balanced", 1.0, 1.0),))

    def test_orienteering(self):
        with pytest.raises(ValueError):
            OrienteeringConfig(road_factor=0.9)
        with pytest.raises(ValueError):
            OrienteeringConfig(routing_weight_min=3.0)
        with pytest.raises(ValueError):
            OrienteeringConfig(max_iterations=0)

    def test_region_and_waypoints(self):
        with pytest.raises(ValueError):
            RegionConfig(search_radius=0)
        with pytest.raises(ValueError):
            WaypointConfig(n_alternatives=-1)
        with pytest.raises(ValueError):
            LoggingConfig(level="LOUD")

    def test_models(self):
        with pytest.raises(ValueError):
            GridParams(lat_step=0.0, lon_step=0.01, origin_lat=0.0, origin_lon=0.0)
        with pytest.raises(ValueError):
            Ubersquadrat(3, 0, 0, 3)


class TestScoringHelpers:
    def test_hole_multiplier_by_layer(self):
        scoring = ScoringConfig()
        assert scoring.hole_multiplier_for(0) == 800
        assert scoring.hole_multiplier_for(3) == 400
        assert scoring.hole_multiplier_for(6) == 200

    def test_mode_multipliers(self):
        scoring = ScoringConfig()
        assert scoring.multipliers_for(OptimizationMode.EDGE) == (3.0, 0.3)
        assert scoring.multipliers_for(OptimizationMode.HOLES) == (0.3, 2.0)
        assert scoring.multipliers_for(OptimizationMode.BALANCED) == (1.0, 1.0)

    def test_clamp_weight(self):
        config = OrienteeringConfig()
        assert config.clamp_weight(0.1) == 0.5
        assert config.clamp_weight(1.2) == 1.2
        assert config.clamp_weight(7.0) == 2.0


class TestValueModels:
    def test_square_key(self):
        key = SquareKey.parse("-3,12")
        assert key == SquareKey(-3, 12)
        assert str(key) == "-3,12"
        assert key in {(-3, 12)}
        with pytest.raises(ValueError):
            SquareKey.parse("3")

    def test_to_visited_set(self):
        visited = to_visited_set(["1,2", (3, 4), SquareKey(5, 6)])
        assert visited == frozenset({SquareKey(1, 2), SquareKey(3, 4), SquareKey(5, 6)})

    def test_enum_factories(self):
        assert Direction.from_string(" s ") is Direction.S
        assert OptimizationMode.from_string("HOLES") is OptimizationMode.HOLES
        assert OptimizationMode.from_string("nope") is OptimizationMode.BALANCED
        assert Approach.from_string(None) is Approach.STRATEGIC

    def test_ubersquadrat_from_dict(self):
        base = Ubersquadrat.from_dict({"minI": 0, "maxI": 15, "minJ": 2, "maxJ": 17})
        assert base.size_label == "16×16"
        assert base.contains(0, 2)
        assert not base.contains(16, 2)

    def test_grid_params_from_camel_case(self):
        grid = GridParams.from_dict(
            {"latStep": 0.01, "lonStep": 0.015, "originLat": 50.0, "originLon": 8.0}
        )
        assert grid == GridParams(0.01, 0.015, 50.0, 8.0)


class TestExportDicts:
    """Plain-dict forms handed to export collaborators."""

    def test_selected_square(self):
        square = SelectedSquare(
            key=SquareKey(4, 1),
            bounds=((50.04, 8.015), (50.05, 8.03)),
            score=10125.0,
            layer_distance=0,
            edge="N",
            hole_id=2,
        )
        data = square.as_dict()
        assert data["grid_coords"] == {"i": 4, "j": 1}
        assert data["bounds"] == [[50.04, 8.015], [50.05, 8.03]]
        assert data["hole_id"] == 2
        assert "cycling_distance_km" not in data

    def test_waypoints_to_dicts(self):
        alternative = Waypoint(lat=50.0, lon=8.0, type=WaypointType.NEAREST, priority=1.0)
        waypoints = [
            Waypoint(
                lat=50.1, lon=8.1, type=WaypointType.MIDPOINT, priority=2.0,
                square_index=0, grid_key=SquareKey(1, 2), alternatives=(alternative,),
            ),
            Waypoint(lat=50.2, lon=8.2, type=WaypointType.CENTER_FALLBACK, square_index=1),
        ]
        data = waypoints_to_dicts(waypoints)
        assert data[0]["type"] == "midpoint"
        assert data[0]["alternatives"][0]["type"] == "nearest"
        assert data[1]["type"] == "center-fallback"
        assert data[1]["has_road"] is False
        assert "grid_coords" not in data[1]
