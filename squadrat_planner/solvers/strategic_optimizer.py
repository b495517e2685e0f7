#!/usr/bin/env python3
"""
Squadrat Planner - Strategic Optimizer

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Recommend target_count new squares around the Übersquadrat,
chosen for strategic value first; routing happens afterward.

PHASES:
1. Edge analysis            (region_analysis.analyze_edges)
2. Hole detection           (region_analysis.detect_holes)
3. Perimeter candidates     (scoring.find_perimeter_candidates)
4. Strategic scoring        (scoring.score_candidate)
5. Greedy route selection   (_select_greedy)

Greedy selection takes the best-scoring square, then repeatedly the square
maximizing score - penalty × Manhattan distance to the LAST selected square
(+ bonus for continuing a hole already started). Re-scoring only against the
last square can zig-zag for large target counts.

Vetoed candidates (outside every selected direction) never enter the
selection pool, so a direction filter is a hard guarantee on the output.

CONFIGURATION ARCHITECTURE:
- No CONFIG access - all weights passed via typed config objects

For Navigation: Use VS Code outline (Ctrl+Shift+O) to jump between sections.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from squadrat_planner.config_types import RegionConfig, ScoringConfig, StrategicConfig
from squadrat_planner.models.grid_models import (
    Approach,
    GridParams,
    OptimizationMode,
    OptimizationResult,
    ScoredCandidate,
    SelectedSquare,
    Ubersquadrat,
    to_visited_set,
)
from squadrat_planner.solvers.grid_geometry import manhattan_distance, rect_from_ij
from squadrat_planner.solvers.region_analysis import analyze_region
from squadrat_planner.solvers.scoring import find_perimeter_candidates, normalize_directions, score_candidate


def _select_greedy(
    scored: List[ScoredCandidate],
    target_count: int,
    strategic: StrategicConfig,
) -> List[Tuple[ScoredCandidate, float]]:
    """Pick up to target_count candidates; returns (candidate, route score)."""
    if not scored or target_count <= 0:
        return []

    # sorted() is stable: equal scores keep row-major scan order
    remaining = sorted(scored, key=lambda c: -c.score)
    first = remaining.pop(0)
    selected = [(first, first.score)]
    selected_holes = {first.hole_id} if first.hole_id is not None else set()

    while len(selected) < target_count and remaining:
        last = selected[-1][0].key
        route_scores = []
        for cand in remaining:
            route_score = cand.score - manhattan_distance(cand.key, last) * strategic.distance_penalty
            if cand.hole_id is not None and cand.hole_id in selected_holes:
                route_score += strategic.hole_continuation_bonus
            route_scores.append(route_score)

        best_idx = max(range(len(remaining)), key=lambda k: (route_scores[k], -k))
        best = remaining.pop(best_idx)
        selected.append((best, route_scores[best_idx]))
        if best.hole_id is not None:
            selected_holes.add(best.hole_id)

    return selected


def optimize_strategic(
    base: Ubersquadrat,
    target_count: int,
    directions: Optional[Iterable[object]],
    visited: Iterable[object],
    grid: GridParams,
    mode: OptimizationMode = OptimizationMode.BALANCED,
    max_hole_size: Optional[int] = None,
    scoring: Optional[ScoringConfig] = None,
    region: Optional[RegionConfig] = None,
    strategic: Optional[StrategicConfig] = None,
    logger: Optional[logging.Logger] = None,
) -> OptimizationResult:
    """
    Select target_count squares around the Übersquadrat by strategic value.

    Args:
        base: Übersquadrat in grid index space
        target_count: Number of squares to recommend
        directions: Selected sides (Direction or "N"/"S"/"E"/"W"); None or
            all four disables direction filtering
        visited: Visited squares (SquareKey, (i, j) tuples or "i,j" strings)
        grid: Grid parameters for converting selections to rectangles
        mode: Scoring emphasis
        max_hole_size: Largest hole worth filling (region default if None)
        scoring / region / strategic: Typed config sections
        logger: Optional logger

    Returns:
        OptimizationResult with squares in selection order. Empty (not an
        error) when no candidate exists in the search radius.
    """
    scoring = scoring or ScoringConfig()
    region = region or RegionConfig()
    strategic = strategic or StrategicConfig()
    if max_hole_size is None:
        max_hole_size = region.default_max_hole_size

    visited_set = to_visited_set(visited)
    direction_set = normalize_directions(directions)

    if logger:
        logger.info(
            f"   🧭 Strategic optimizer: Übersquadrat {base.size_label}, "
            f"visited={len(visited_set)}, mode={mode.value}, target={target_count}"
        )

    snapshot = analyze_region(
        base,
        visited_set,
        max_hole_size,
        search_radius=region.search_radius,
        max_region_size=region.max_region_size,
        logger=logger,
    )

    candidates = find_perimeter_candidates(base, visited_set, region.search_radius)
    scored = [
        score_candidate(
            c,
            base,
            snapshot.edges,
            snapshot.hole_map,
            visited_set,
            mode,
            direction_set,
            scoring,
            strategic.adjacency_bonus,
        )
        for c in candidates
    ]
    eligible = [s for s in scored if not s.vetoed]

    stats = {
        "candidates": len(candidates),
        "eligible": len(eligible),
        "vetoed": len(scored) - len(eligible),
        "holes": len(snapshot.holes),
        "edges": snapshot.edges_as_dicts(),
        "target_count": target_count,
    }

    if logger:
        logger.info(f"      Candidates: {len(candidates)} unvisited, {len(eligible)} eligible")

    if target_count <= 0:
        stats["termination_reason"] = "target-reached"
        return OptimizationResult(approach=Approach.STRATEGIC, stats=stats)

    picks = _select_greedy(eligible, target_count, strategic)
    if not picks:
        if logger:
            logger.info("   ⚠️ No candidates available")
        stats["termination_reason"] = "no-candidates"
        return OptimizationResult(approach=Approach.STRATEGIC, stats=stats)

    squares = []
    for cand, route_score in picks:
        breakdown = dict(cand.breakdown)
        breakdown["route"] = route_score - cand.score
        squares.append(
            SelectedSquare(
                key=cand.key,
                bounds=rect_from_ij(cand.key.i, cand.key.j, grid),
                score=cand.score,
                layer_distance=cand.candidate.layer_distance,
                edge=cand.candidate.edge,
                score_breakdown=breakdown,
                hole_id=cand.hole_id,
            )
        )

    stats["termination_reason"] = (
        "target-reached" if len(squares) >= target_count else "candidates-exhausted"
    )
    if logger:
        path = " → ".join(f"({s.key.i},{s.key.j})" for s in squares)
        logger.info(f"   ✅ Strategic: selected {len(squares)} squares: {path}")

    return OptimizationResult(approach=Approach.STRATEGIC, squares=squares, stats=stats)


def scored_candidates(
    base: Ubersquadrat,
    visited: Iterable[object],
    mode: OptimizationMode = OptimizationMode.BALANCED,
    max_hole_size: int = 5,
    scoring: Optional[ScoringConfig] = None,
    region: Optional[RegionConfig] = None,
    strategic: Optional[StrategicConfig] = None,
) -> List[ScoredCandidate]:
    """All perimeter candidates with scores, unfiltered, in scan order."""
    scoring = scoring or ScoringConfig()
    region = region or RegionConfig()
    strategic = strategic or StrategicConfig()
    visited_set = to_visited_set(visited)
    snapshot = analyze_region(
        base, visited_set, max_hole_size, region.search_radius, region.max_region_size
    )
    return [
        score_candidate(
            c,
            base,
            snapshot.edges,
            snapshot.hole_map,
            visited_set,
            mode,
            normalize_directions(None),
            scoring,
            strategic.adjacency_bonus,
        )
        for c in find_perimeter_candidates(base, visited_set, region.search_radius)
    ]
