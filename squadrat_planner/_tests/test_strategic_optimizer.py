#!/usr/bin/env python3
"""
Unit tests for candidate scoring and the strategic optimizer.

Tests:
1. Score terms: layer schedule, edge completion, holes, adjacency, veto
2. Mode multipliers
3. Selection count, uniqueness and placement outside the Übersquadrat
4. Direction filter guarantee
5. End-to-end 4×4 scenario

Run with: python -m pytest squadrat_planner/_tests/test_strategic_optimizer.py -v
"""

import pytest

from squadrat_planner.config_types import ScoringConfig, StrategicConfig
from squadrat_planner.models.grid_models import (
    ALL_DIRECTIONS,
    Direction,
    GridParams,
    OptimizationMode,
    SquareKey,
    Ubersquadrat,
)
from squadrat_planner.solvers import optimize_strategic, scored_candidates
from squadrat_planner.solvers.grid_geometry import iter_window, rect_from_ij
from squadrat_planner.solvers.region_analysis import analyze_region
from squadrat_planner.solvers.scoring import (
    find_perimeter_candidates,
    make_candidate,
    normalize_directions,
    score_candidate,
)


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
    return set(iter_window(base))


@pytest.fixture
def full_window(base):
    return set(iter_window(base.expanded(5)))


def _score(key, base, visited, mode=OptimizationMode.BALANCED, directions=None):
    snapshot = analyze_region(base, visited, max_hole_size=5)
    return score_candidate(
        make_candidate(key, base),
        base,
        snapshot.edges,
        snapshot.hole_map,
        visited,
        mode,
        normalize_directions(directions),
        ScoringConfig(),
        StrategicConfig().adjacency_bonus,
    )


# ============================================================================
# SCORING
# ============================================================================


class TestDirections:
    def test_none_and_empty_mean_all(self):
        assert normalize_directions(None) == ALL_DIRECTIONS
        assert normalize_directions([]) == ALL_DIRECTIONS

    def test_strings_are_parsed(self):
        assert normalize_directions(["n", "E"]) == {Direction.N, Direction.E}

    def test_unknown_direction_raises(self):
        with pytest.raises(ValueError):
            normalize_directions(["X"])


class TestCandidates:
    def test_candidates_exclude_visited_and_inside(self, base, interior):
        visited = interior | {SquareKey(4, 0)}
        keys = {c.key for c in find_perimeter_candidates(base, visited, 5)}
        assert SquareKey(4, 0) not in keys
        assert not any(base.contains(k.i, k.j) for k in keys)
        assert SquareKey(4, 1) in keys
        assert SquareKey(-6, 0) not in keys


class TestScoreCandidate:
    """Individual score terms."""

    def test_edge_completion_and_adjacency(self, base, interior):
        visited = interior | {SquareKey(4, j) for j in range(4)}
        scored = _score(SquareKey(5, 0), base, visited)
        assert scored.breakdown["layer"] == 5000
        assert scored.breakdown["edge"] == 500
        assert scored.breakdown["adjacency"] == 25
        assert scored.breakdown["hole"] == 0
        assert scored.score == 5625
        assert not scored.vetoed

    def test_hole_and_completion_bonus(self, base, full_window):
        visited = full_window - {SquareKey(-2, -2)}
        scored = _score(SquareKey(-2, -2), base, visited)
        assert scored.hole_id is not None
        assert scored.breakdown["layer"] == 2000
        assert scored.breakdown["hole"] == 800
        assert scored.breakdown["hole_completion"] == 1500
        assert scored.breakdown["adjacency"] == 100
        assert scored.score == 100 + 2000 + 500 + 800 + 1500 + 100

    def test_mode_multipliers(self, base, full_window):
        visited = full_window - {SquareKey(-2, -2)}
        holes = _score(SquareKey(-2, -2), base, visited, OptimizationMode.HOLES)
        edge = _score(SquareKey(-2, -2), base, visited, OptimizationMode.EDGE)
        assert holes.breakdown["hole"] == 1600
        assert holes.breakdown["edge"] == 150
        assert edge.breakdown["hole"] == 240
        assert edge.breakdown["edge"] == 1500

    def test_direction_veto(self, base, interior):
        scored = _score(SquareKey(-1, 1), base, interior, directions=["N"])
        assert scored.vetoed
        assert scored.breakdown["direction"] == -1000000

    def test_all_directions_never_veto(self, base, interior):
        scored = _score(SquareKey(-1, 1), base, interior, directions=["N", "S", "E", "W"])
        assert not scored.vetoed

    def test_layer_schedule_beyond_table(self):
        scoring = ScoringConfig()
        assert scoring.layer_score(0) == 10000
        assert scoring.layer_score(4) == -2000
        assert scoring.layer_score(9) == -10000


# ============================================================================
# STRATEGIC OPTIMIZER
# ============================================================================


class TestOptimizeStrategic:
    """Greedy route-aware selection."""

    def test_end_to_end_4x4(self, base, grid):
        result = optimize_strategic(base, 5, None, set(), grid)
        assert len(result) == 5
        assert len(set(result.keys)) == 5
        for square in result.squares:
            assert not base.contains(square.key.i, square.key.j)
            assert square.layer_distance == 0
            assert square.bounds == rect_from_ij(square.key.i, square.key.j, grid)
        assert result.rectangles == [sq.bounds for sq in result.squares]
        assert result.stats["termination_reason"] == "target-reached"

    def test_border_outscores_outer_layers(self, base):
        scored = scored_candidates(base, set())
        border = [s.score for s in scored if s.candidate.layer_distance == 0]
        outer = [s.score for s in scored if s.candidate.layer_distance >= 1]
        assert min(border) > max(outer)

    def test_first_pick_is_first_best_in_scan_order(self, base, grid):
        result = optimize_strategic(base, 1, None, set(), grid)
        assert result.keys == [SquareKey(-1, -1)]

    def test_follows_the_border(self, base, grid):
        result = optimize_strategic(base, 3, None, set(), grid)
        assert result.keys == [SquareKey(-1, -1), SquareKey(-1, 0), SquareKey(-1, 1)]

    def test_count_limited_by_candidates(self, base, grid, full_window):
        open_squares = {SquareKey(-1, 0), SquareKey(4, 2), SquareKey(1, 7)}
        result = optimize_strategic(base, 10, None, full_window - open_squares, grid)
        assert set(result.keys) == open_squares
        assert result.stats["termination_reason"] == "candidates-exhausted"

    def test_no_candidates_is_empty_not_error(self, base, grid, full_window):
        result = optimize_strategic(base, 5, None, full_window, grid)
        assert result.is_empty
        assert result.rectangles == []
        assert result.stats["termination_reason"] == "no-candidates"

    def test_zero_target_is_reached_not_starved(self, base, grid):
        result = optimize_strategic(base, 0, None, set(), grid)
        assert result.is_empty
        assert result.stats["eligible"] > 0
        assert result.stats["termination_reason"] == "target-reached"

    def test_direction_north_only(self, base, grid, interior):
        result = optimize_strategic(base, 8, ["N"], interior, grid)
        assert len(result) == 8
        assert all(sq.key.i > base.max_i for sq in result.squares)
        assert result.stats["vetoed"] > 0

    def test_accepts_string_keys(self, base, grid, interior):
        as_strings = {str(k) for k in interior}
        from_keys = optimize_strategic(base, 4, None, interior, grid)
        from_strings = optimize_strategic(base, 4, None, as_strings, grid)
        assert from_keys.keys == from_strings.keys

    def test_hole_continuation(self, base, grid, full_window):
        pair = {SquareKey(-3, 1), SquareKey(-3, 2)}
        result = optimize_strategic(base, 2, None, full_window - pair, grid)
        assert set(result.keys) == pair
        assert result.squares[0].hole_id == result.squares[1].hole_id

    def test_route_term_in_breakdown(self, base, grid):
        result = optimize_strategic(base, 3, None, set(), grid)
        assert result.squares[0].score_breakdown["route"] == 0
        assert result.squares[1].score_breakdown["route"] == -100
