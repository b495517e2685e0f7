#!/usr/bin/env python3
"""
Unit tests for region analysis (edges and holes).

Tests:
1. Edge completion and can_expand flags
2. Isolated unvisited square reported as a hole of size 1
3. Holes larger than max_hole_size excluded from the hole map
4. Hole ids stable across runs, flood fill bounded by max_region_size

Run with: python -m pytest squadrat_planner/_tests/test_region_analysis.py -v
"""

import numpy as np
import pytest

from squadrat_planner.models.grid_models import Direction, SquareKey, Ubersquadrat
from squadrat_planner.solvers.grid_geometry import iter_window
from squadrat_planner.solvers.region_analysis import (
    analyze_edges,
    analyze_region,
    build_hole_map,
    detect_holes,
    edge_squares,
    find_contiguous_region,
    visited_mask,
)


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def base():
    return Ubersquadrat(0, 3, 0, 3)


@pytest.fixture
def full_window(base):
    """Every square of the default search window (radius 5)."""
    return set(iter_window(base.expanded(5)))


# ============================================================================
# EDGE ANALYSIS
# ============================================================================


class TestEdgeAnalysis:
    """Completion of the row/column just outside each side."""

    def test_edge_squares_span_the_side(self, base):
        assert edge_squares(Direction.N, base) == tuple(SquareKey(4, j) for j in range(4))
        assert edge_squares(Direction.W, base) == tuple(SquareKey(i, -1) for i in range(4))

    def test_empty_visited(self, base):
        edges = analyze_edges(base, frozenset())
        for edge in edges.values():
            assert edge.total == 4
            assert edge.visited_count == 0
            assert edge.completion == 0.0
            assert not edge.can_expand

    def test_partial_and_full_edges(self, base):
        visited = {SquareKey(4, j) for j in range(4)} | {SquareKey(0, 4), SquareKey(1, 4)}
        edges = analyze_edges(base, visited)
        assert edges[Direction.N].completion == 100.0
        assert edges[Direction.N].can_expand
        assert edges[Direction.E].visited_count == 2
        assert edges[Direction.E].unvisited_count == 2
        assert edges[Direction.E].completion == 50.0
        assert not edges[Direction.E].can_expand

    def test_edges_in_nsew_order(self, base):
        assert list(analyze_edges(base, frozenset())) == [
            Direction.N,
            Direction.S,
            Direction.E,
            Direction.W,
        ]


# ============================================================================
# HOLE DETECTION
# ============================================================================


class TestHoleDetection:
    """Flood fill of unvisited components."""

    def test_isolated_square_is_hole_of_size_one(self, base, full_window):
        visited = full_window - {SquareKey(-2, -2)}
        holes = detect_holes(base, visited, max_hole_size=5)
        assert len(holes) == 1
        assert holes[0].size == 1
        assert holes[0].squares == (SquareKey(-2, -2),)
        assert holes[0].avg_layer == 2.0

    def test_large_hole_excluded_from_map(self, base, full_window):
        big = {SquareKey(6, 0), SquareKey(6, 1), SquareKey(6, 2)}
        small = {SquareKey(-3, 2)}
        visited = full_window - big - small
        holes = detect_holes(base, visited, max_hole_size=2)
        hole_map = build_hole_map(holes)
        assert [h.size for h in holes] == [1]
        assert SquareKey(-3, 2) in hole_map
        for key in big:
            assert key not in hole_map

    def test_unbounded_region_is_wilderness(self, base):
        holes = detect_holes(base, frozenset(), max_hole_size=20)
        assert holes == []

    def test_hole_ids_are_deterministic(self, base, full_window):
        visited = full_window - {SquareKey(-3, 0), SquareKey(7, 7), SquareKey(2, 6)}
        first = detect_holes(base, visited, max_hole_size=5)
        second = detect_holes(base, set(reversed(sorted(visited))), max_hole_size=5)
        assert [(h.id, h.squares) for h in first] == [(h.id, h.squares) for h in second]
        # row-major discovery: lowest row first
        assert first[0].squares == (SquareKey(-3, 0),)
        assert first[-1].squares == (SquareKey(7, 7),)

    def test_capped_component_yields_no_holes(self, base, full_window):
        corridor = {SquareKey(6, j) for j in range(4)}
        visited = full_window - corridor
        holes = detect_holes(base, visited, max_hole_size=3, max_region_size=2)
        assert holes == []

    def test_capped_component_takes_one_id(self, base, full_window):
        corridor = {SquareKey(-4, j) for j in range(4)}
        visited = full_window - corridor - {SquareKey(7, 7)}
        holes = detect_holes(base, visited, max_hole_size=3, max_region_size=2)
        assert [(h.id, h.squares) for h in holes] == [(1, (SquareKey(7, 7),))]

    def test_ids_count_dropped_regions(self, base, full_window):
        visited = full_window - {SquareKey(-4, 0), SquareKey(-4, 1), SquareKey(7, 7)}
        holes = detect_holes(base, visited, max_hole_size=1)
        assert len(holes) == 1
        assert holes[0].id == 1


class TestFloodFill:
    """Bounded breadth-first region growth."""

    def test_region_stops_at_max_size(self):
        window = Ubersquadrat(0, 9, 0, 9)
        blocked = visited_mask(window, frozenset())
        processed = np.zeros_like(blocked)
        region = find_contiguous_region(SquareKey(0, 0), window, blocked, processed, 7)
        assert len(region) == 7
        assert len(set(region)) == 7
        # the rest of the component is consumed, not left for another region
        assert processed.all()

    def test_blocked_start_returns_empty(self):
        window = Ubersquadrat(0, 2, 0, 2)
        blocked = visited_mask(window, {SquareKey(1, 1)})
        processed = np.zeros_like(blocked)
        assert find_contiguous_region(SquareKey(1, 1), window, blocked, processed, 100) == []

    def test_visited_mask(self):
        window = Ubersquadrat(-1, 1, -1, 1)
        mask = visited_mask(window, {SquareKey(-1, -1), SquareKey(5, 5)})
        assert mask.shape == (3, 3)
        assert mask[0, 0]
        assert mask.sum() == 1


class TestRegionSnapshot:
    def test_snapshot(self, base, full_window):
        visited = full_window - {SquareKey(-2, -2)}
        snapshot = analyze_region(base, visited, max_hole_size=5)
        assert len(snapshot.holes) == 1
        assert SquareKey(-2, -2) in snapshot.hole_map
        assert snapshot.edges_as_dicts()["N"]["can_expand"] is True
