#!/usr/bin/env python3
"""
Squadrat Planner - Strategic Scoring

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Candidate enumeration and the strategic value of a square,
shared by the strategic and orienteering optimizers.

SCORE TERMS (recorded in ScoredCandidate.breakdown):
- base: flat starting score
- layer: non-linear layer schedule, dominates every other term
- edge: floor(max completion % of touched edges × factor) × mode multiplier
- hole: hole size × layer-dependent multiplier × mode multiplier
- hole_completion: flat bonus when the candidate is the last open square
- adjacency: per visited 4-neighbour (weight differs per optimizer)
- direction: hard veto when the square matches none of the directions

CONFIGURATION ARCHITECTURE:
- No CONFIG access - weights come in through ScoringConfig

For Navigation: Use VS Code outline (Ctrl+Shift+O) to jump between sections.
"""

import math
from typing import AbstractSet, Dict, Iterable, List, Optional

from squadrat_planner.config_types import ScoringConfig
from squadrat_planner.models.grid_models import (
    ALL_DIRECTIONS,
    Candidate,
    Direction,
    EdgeAnalysis,
    Hole,
    OptimizationMode,
    ScoredCandidate,
    SquareKey,
    Ubersquadrat,
)
from squadrat_planner.solvers.grid_geometry import edge_label, is_on_border, iter_window, layer_distance


# ═══════════════════════════════════════════════════════════════════════════
# 🧭 DIRECTION FILTER
# ═══════════════════════════════════════════════════════════════════════════


def normalize_directions(
    directions: Optional[Iterable[object]],
) -> AbstractSet[Direction]:
    """Directions as a frozenset; None or empty means no filtering."""
    if not directions:
        return ALL_DIRECTIONS
    result = set()
    for d in directions:
        result.add(d if isinstance(d, Direction) else Direction.from_string(str(d)))
    return frozenset(result)


def filters_directions(directions: AbstractSet[Direction]) -> bool:
    return len(directions) < len(ALL_DIRECTIONS)


def matches_directions(
    key: SquareKey, base: Ubersquadrat, directions: AbstractSet[Direction]
) -> bool:
    """True if the square lies beyond any selected side."""
    position = {
        Direction.N: key.i > base.max_i,
        Direction.S: key.i < base.min_i,
        Direction.E: key.j > base.max_j,
        Direction.W: key.j < base.min_j,
    }
    return any(position[d] for d in directions)


# ═══════════════════════════════════════════════════════════════════════════
# 🎯 CANDIDATE ENUMERATION
# ═══════════════════════════════════════════════════════════════════════════


def make_candidate(key: SquareKey, base: Ubersquadrat) -> Candidate:
    layer = 0 if is_on_border(key.i, key.j, base) else layer_distance(key.i, key.j, base).total
    return Candidate(key=key, edge=edge_label(key.i, key.j, base), layer_distance=layer)


def find_perimeter_candidates(
    base: Ubersquadrat,
    visited: AbstractSet[SquareKey],
    search_radius: int = 5,
) -> List[Candidate]:
    """Unvisited squares outside the Übersquadrat, row-major order."""
    candidates = []
    for key in iter_window(base.expanded(search_radius)):
        if key in visited or base.contains(key.i, key.j):
            continue
        candidate = make_candidate(key, base)
        if candidate.layer_distance > search_radius:
            continue
        candidates.append(candidate)
    return candidates


# ═══════════════════════════════════════════════════════════════════════════
# 🧮 SCORING
# ═══════════════════════════════════════════════════════════════════════════


def edge_completion_bonus(
    candidate: Candidate,
    edges: Dict[Direction, EdgeAnalysis],
    scoring: ScoringConfig,
) -> int:
    """floor(max completion of the touched edges × factor), 0 if none."""
    touched = [edges[d].completion for d in Direction if d.value in candidate.edge]
    max_completion = max(touched) if touched else 0.0
    return int(math.floor(max_completion * scoring.edge_completion_factor))


def closes_hole(hole: Hole, key: SquareKey, visited: AbstractSet[SquareKey]) -> bool:
    """True if every other square of the hole is already visited."""
    return all(sq in visited or sq == key for sq in hole.squares)


def score_candidate(
    candidate: Candidate,
    base: Ubersquadrat,
    edges: Dict[Direction, EdgeAnalysis],
    hole_map: Dict[SquareKey, Hole],
    visited: AbstractSet[SquareKey],
    mode: OptimizationMode,
    directions: AbstractSet[Direction],
    scoring: ScoringConfig,
    adjacency_bonus: float,
) -> ScoredCandidate:
    """
    Strategic value of one candidate.

    Args:
        candidate: Square to score
        base: Übersquadrat the layers are measured from
        edges: Edge analysis of the original visited set
        hole_map: Square → hole lookup of the retained holes
        visited: Visited snapshot used for hole completion and adjacency
        mode: Selects the edge/hole multipliers
        directions: Selected sides; all four disables the veto
        scoring: Weights
        adjacency_bonus: Score per visited 4-neighbour

    Returns:
        ScoredCandidate with total score and per-term breakdown
    """
    layer = candidate.layer_distance
    edge_mult, hole_mult = scoring.multipliers_for(mode)

    edge_bonus = int(math.floor(edge_completion_bonus(candidate, edges, scoring) * edge_mult))

    hole = hole_map.get(candidate.key)
    hole_bonus = 0
    completion_bonus = 0.0
    if hole is not None:
        hole_bonus = int(
            math.floor(hole.size * scoring.hole_multiplier_for(layer) * hole_mult)
        )
        if closes_hole(hole, candidate.key, visited):
            completion_bonus = scoring.hole_completion_bonus

    adjacency = sum(1 for nb in candidate.key.neighbors() if nb in visited)

    vetoed = filters_directions(directions) and not matches_directions(
        candidate.key, base, directions
    )

    breakdown = {
        "base": float(scoring.base_score),
        "layer": scoring.layer_score(layer),
        "edge": float(edge_bonus),
        "hole": float(hole_bonus),
        "hole_completion": completion_bonus,
        "adjacency": adjacency * adjacency_bonus,
        "direction": scoring.direction_veto if vetoed else 0.0,
    }
    return ScoredCandidate(
        candidate=candidate,
        score=sum(breakdown.values()),
        breakdown=breakdown,
        hole_id=hole.id if hole is not None else None,
        vetoed=vetoed,
    )
