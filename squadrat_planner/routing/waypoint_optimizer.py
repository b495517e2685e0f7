#!/usr/bin/env python3
"""
Squadrat Planner - Waypoint Optimizer

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Pick, for every selected square, the point on a real road
where the route should cross it.

CANDIDATE STRATEGIES (priority: plain / on a connecting road):
1. Intersections of two distinct roads inside the square   3 / 5
2. Midpoint between the ends of a clipped road              2 / 4
3. Point on a road nearest to the square centre             1 / 3.5

A road is "connecting" when its unclipped geometry also intersects the next
square in route order. Candidates are ranked by priority (descending), then
by summed distance to the previous and next route points, or to the square
centre when neither is known.

Squares without roads get their centre, tagged no-road (no road touches
the square) or center-fallback (roads touch it but yield no candidate).

Key Interactions:
-----------------
- Input: selected squares (SelectedSquare or ((s, w), (n, e)) rectangles)
  and road features in (lon, lat) order, as GeoJSON dicts, coordinate
  sequences or shapely lines
- Output: WaypointResult with one Waypoint per square, in input order

ERROR HANDLING:
- A malformed road is skipped (logged at DEBUG), never fatal to a square

For Navigation: Use VS Code outline (Ctrl+Shift+O) to jump between sections.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, NamedTuple, Optional, Sequence, Tuple

from shapely.errors import ShapelyError
from shapely.geometry import LineString, MultiLineString, Point, shape
from shapely.geometry.base import BaseGeometry
from shapely.ops import nearest_points

from squadrat_planner.config_types import WaypointConfig
from squadrat_planner.models.grid_models import GeoPoint, Rect, SquareKey
from squadrat_planner.models.route_models import (
    Waypoint,
    WaypointResult,
    WaypointStatistics,
    WaypointType,
)
from squadrat_planner.routing.geodesy import distance_km, midpoint, to_geo_point
from squadrat_planner.solvers.grid_geometry import rect_center, rect_to_box

_GEOMETRY_ERRORS = (ShapelyError, ValueError, TypeError, KeyError, IndexError)


class RoadInSquare(NamedTuple):
    """A road touching a square: full geometry and the part inside."""

    index: int
    original: BaseGeometry
    parts: Tuple[LineString, ...]


@dataclass(frozen=True)
class WaypointCandidate:
    lat: float
    lon: float
    type: WaypointType
    priority: float
    is_connecting: bool


# ═══════════════════════════════════════════════════════════════════════════
# 🛣️ ROAD GEOMETRY
# ═══════════════════════════════════════════════════════════════════════════


def road_to_geometry(feature: Any) -> BaseGeometry:
    """
    Build a shapely line from a road feature.

    Accepts a GeoJSON Feature, a GeoJSON geometry dict, a shapely geometry
    or a bare sequence of (lon, lat) vertices.

    Raises:
        ValueError / TypeError / KeyError: For unusable input
    """
    if isinstance(feature, BaseGeometry):
        geom = feature
    elif isinstance(feature, dict):
        geometry = feature["geometry"] if "geometry" in feature else feature
        # GeoJSON allows "geometry": null
        if not isinstance(geometry, dict) or not isinstance(geometry.get("type"), str):
            raise ValueError("road has no geometry")
        geom = shape(geometry)
    else:
        geom = LineString([(float(x), float(y)) for x, y in feature])
    if geom.is_empty or geom.geom_type not in ("LineString", "MultiLineString"):
        raise ValueError(f"road must be a non-empty line, got {geom.geom_type}")
    return geom


def prepare_roads(
    roads: Sequence[Any], logger: Optional[logging.Logger] = None
) -> Tuple[List[Tuple[int, BaseGeometry]], int]:
    """Parse every road once; returns ((index, geometry) pairs, skipped count)."""
    prepared = []
    skipped = 0
    for idx, feature in enumerate(roads):
        try:
            prepared.append((idx, road_to_geometry(feature)))
        except _GEOMETRY_ERRORS as e:
            skipped += 1
            if logger:
                logger.debug(f"      Skipping road {idx}: {e}")
    return prepared, skipped


def _line_parts(geom: BaseGeometry) -> Tuple[LineString, ...]:
    if isinstance(geom, LineString):
        return (geom,) if not geom.is_empty and len(geom.coords) >= 2 else ()
    if hasattr(geom, "geoms"):
        parts: Tuple[LineString, ...] = ()
        for sub in geom.geoms:
            parts += _line_parts(sub)
        return parts
    return ()


def find_roads_in_square(
    roads: Sequence[Tuple[int, BaseGeometry]],
    rect: Rect,
    logger: Optional[logging.Logger] = None,
) -> List[RoadInSquare]:
    """Roads intersecting the square, clipped to it."""
    square = rect_to_box(rect)
    found = []
    for idx, geom in roads:
        try:
            if not geom.intersects(square):
                continue
            parts = _line_parts(geom.intersection(square))
        except _GEOMETRY_ERRORS as e:
            if logger:
                logger.debug(f"      Skipping road {idx} in square: {e}")
            continue
        if parts:
            found.append(RoadInSquare(idx, geom, parts))
    return found


def find_connecting_roads(
    roads_in_square: Sequence[RoadInSquare], next_rect: Optional[Rect]
) -> set:
    """Positions (in roads_in_square) of roads that also enter next_rect."""
    if next_rect is None:
        return set()
    next_square = rect_to_box(next_rect)
    connecting = set()
    for pos, road in enumerate(roads_in_square):
        try:
            if road.original.intersects(next_square):
                connecting.add(pos)
        except _GEOMETRY_ERRORS:
            continue
    return connecting


# ═══════════════════════════════════════════════════════════════════════════
# 🎯 CANDIDATES
# ═══════════════════════════════════════════════════════════════════════════


def _points_of(geom: BaseGeometry) -> List[Point]:
    if isinstance(geom, Point):
        return [] if geom.is_empty else [geom]
    if hasattr(geom, "geoms"):
        points: List[Point] = []
        for sub in geom.geoms:
            points.extend(_points_of(sub))
        return points
    return []


def collect_candidates(
    roads_in_square: Sequence[RoadInSquare],
    rect: Rect,
    connecting: set,
    config: WaypointConfig,
) -> List[WaypointCandidate]:
    """All candidates of the three strategies, in strategy order."""
    candidates: List[WaypointCandidate] = []
    center = rect_center(rect)
    center_pt = Point(center.lon, center.lat)

    def priority(pair: Tuple[float, float], is_connecting: bool) -> float:
        return pair[1] if is_connecting else pair[0]

    # Strategy 1: road crossings
    for a in range(len(roads_in_square)):
        for b in range(a + 1, len(roads_in_square)):
            try:
                crossing = MultiLineString(roads_in_square[a].parts).intersection(
                    MultiLineString(roads_in_square[b].parts)
                )
            except _GEOMETRY_ERRORS:
                continue
            is_connecting = a in connecting or b in connecting
            for pt in _points_of(crossing):
                candidates.append(
                    WaypointCandidate(
                        lat=pt.y,
                        lon=pt.x,
                        type=WaypointType.INTERSECTION,
                        priority=priority(config.intersection_priority, is_connecting),
                        is_connecting=is_connecting,
                    )
                )

    # Strategy 2: midpoint between the clipped ends
    for pos, road in enumerate(roads_in_square):
        first = road.parts[0].coords[0]
        last = road.parts[-1].coords[-1]
        mid = midpoint(GeoPoint(first[1], first[0]), GeoPoint(last[1], last[0]))
        is_connecting = pos in connecting
        candidates.append(
            WaypointCandidate(
                lat=mid.lat,
                lon=mid.lon,
                type=WaypointType.MIDPOINT,
                priority=priority(config.midpoint_priority, is_connecting),
                is_connecting=is_connecting,
            )
        )

    # Strategy 3: nearest point to the centre
    for pos, road in enumerate(roads_in_square):
        try:
            nearest = nearest_points(MultiLineString(road.parts), center_pt)[0]
        except _GEOMETRY_ERRORS:
            continue
        is_connecting = pos in connecting
        candidates.append(
            WaypointCandidate(
                lat=nearest.y,
                lon=nearest.x,
                type=WaypointType.NEAREST,
                priority=priority(config.nearest_priority, is_connecting),
                is_connecting=is_connecting,
            )
        )

    return candidates


def rank_candidates(
    candidates: List[WaypointCandidate],
    prev_point: Optional[GeoPoint],
    next_point: Optional[GeoPoint],
    center: GeoPoint,
) -> List[WaypointCandidate]:
    """Priority first, then the distance metric (stable for full ties)."""

    def metric(c: WaypointCandidate) -> float:
        here = GeoPoint(c.lat, c.lon)
        if prev_point is None and next_point is None:
            return distance_km(here, center)
        total = 0.0
        if prev_point is not None:
            total += distance_km(here, prev_point)
        if next_point is not None:
            total += distance_km(here, next_point)
        return total

    return sorted(candidates, key=lambda c: (-c.priority, metric(c)))


def _log_candidates(
    ranked: List[WaypointCandidate],
    label: str,
    road_count: int,
    logger: logging.Logger,
) -> None:
    logger.debug(f"      [Waypoint] Square {label}: {len(ranked)} candidates, {road_count} roads")
    for idx, c in enumerate(ranked):
        mark = " ✓" if idx == 0 else ""
        logger.debug(
            f"         [{idx}] {c.type.value} {c.lat:.5f},{c.lon:.5f} (p{c.priority}){mark}"
        )


# ═══════════════════════════════════════════════════════════════════════════
# 📍 PLACEMENT
# ═══════════════════════════════════════════════════════════════════════════


def _square_rect(square: Any) -> Rect:
    bounds = square.bounds if hasattr(square, "bounds") else square
    (south, west), (north, east) = bounds
    return ((float(south), float(west)), (float(north), float(east)))


def _square_key(square: Any) -> Optional[SquareKey]:
    return getattr(square, "key", None)


def _square_label(square: Any, index: int) -> str:
    key = _square_key(square)
    return f"({key.i},{key.j})" if key is not None else f"#{index}"


def _to_waypoint(
    c: WaypointCandidate, index: int, key: Optional[SquareKey], alternatives: tuple = ()
) -> Waypoint:
    return Waypoint(
        lat=c.lat,
        lon=c.lon,
        type=c.type,
        priority=c.priority,
        is_connecting=c.is_connecting,
        square_index=index,
        grid_key=key,
        alternatives=alternatives,
    )


def _fallback(rect: Rect, index: int, key: Optional[SquareKey], kind: WaypointType) -> Waypoint:
    center = rect_center(rect)
    return Waypoint(
        lat=center.lat, lon=center.lon, type=kind, square_index=index, grid_key=key
    )


def _place_one(
    square: Any,
    index: int,
    roads: Sequence[Tuple[int, BaseGeometry]],
    config: WaypointConfig,
    prev_point: Optional[GeoPoint] = None,
    next_point: Optional[GeoPoint] = None,
    next_rect: Optional[Rect] = None,
    with_alternatives: bool = False,
    logger: Optional[logging.Logger] = None,
) -> Waypoint:
    rect = _square_rect(square)
    key = _square_key(square)
    roads_in_square = find_roads_in_square(roads, rect, logger=logger)
    if not roads_in_square:
        return _fallback(rect, index, key, WaypointType.NO_ROAD)

    connecting = find_connecting_roads(roads_in_square, next_rect)
    candidates = collect_candidates(roads_in_square, rect, connecting, config)
    if not candidates:
        return _fallback(rect, index, key, WaypointType.CENTER_FALLBACK)

    ranked = rank_candidates(candidates, prev_point, next_point, rect_center(rect))
    if logger and config.debug_candidates:
        _log_candidates(ranked, _square_label(square, index), len(roads_in_square), logger)

    alternatives: tuple = ()
    if with_alternatives:
        alternatives = tuple(
            _to_waypoint(c, index, key) for c in ranked[1 : 1 + config.n_alternatives]
        )
    return _to_waypoint(ranked[0], index, key, alternatives)


def place_waypoints(
    squares: Sequence[Any],
    roads: Sequence[Any],
    config: Optional[WaypointConfig] = None,
    logger: Optional[logging.Logger] = None,
) -> WaypointResult:
    """
    Order-agnostic placement, used before the visit order is known.

    Ties between equal-priority candidates go to the one nearest the
    square centre.
    """
    config = config or WaypointConfig()
    prepared, skipped = prepare_roads(roads, logger=logger)
    result = WaypointResult(statistics=WaypointStatistics(total=len(squares), skipped_roads=skipped))

    for idx, square in enumerate(squares):
        waypoint = _place_one(square, idx, prepared, config, logger=logger)
        result.waypoints.append(waypoint)
        result.statistics.record(waypoint)
        if not waypoint.has_road:
            result.skipped_squares.append(idx)

    if logger:
        s = result.statistics
        logger.info(
            f"   📍 Waypoints: {s.with_roads} on roads, {s.without_roads} at square centre"
        )
    return result


def place_waypoints_sequenced(
    ordered_squares: Sequence[Any],
    roads: Sequence[Any],
    start_point: Optional[Any] = None,
    roundtrip: bool = False,
    config: Optional[WaypointConfig] = None,
    logger: Optional[logging.Logger] = None,
) -> WaypointResult:
    """
    Order-aware placement, used once the visit order is final.

    For square k the previous point is the start (k = 0) or the waypoint
    just placed; the next point is the centre of square k + 1, or the
    start point after the last square of a roundtrip. Connecting roads
    are detected against square k + 1. Each waypoint keeps up to
    n_alternatives runner-up candidates for refinement.
    """
    config = config or WaypointConfig()
    start = to_geo_point(start_point) if start_point is not None else None
    prepared, skipped = prepare_roads(roads, logger=logger)
    result = WaypointResult(
        statistics=WaypointStatistics(total=len(ordered_squares), skipped_roads=skipped)
    )

    last = len(ordered_squares) - 1
    for idx, square in enumerate(ordered_squares):
        prev_point = start if idx == 0 else result.waypoints[-1].point
        next_rect: Optional[Rect] = None
        next_point: Optional[GeoPoint] = None
        if idx < last:
            next_rect = _square_rect(ordered_squares[idx + 1])
            next_point = rect_center(next_rect)
        elif roundtrip and start is not None:
            next_point = start

        waypoint = _place_one(
            square,
            idx,
            prepared,
            config,
            prev_point=prev_point,
            next_point=next_point,
            next_rect=next_rect,
            with_alternatives=True,
            logger=logger,
        )
        result.waypoints.append(waypoint)
        result.statistics.record(waypoint)
        if not waypoint.has_road:
            result.skipped_squares.append(idx)
        elif prev_point is not None or next_point is not None:
            result.statistics.sequence_optimized += 1

    if logger:
        s = result.statistics
        logger.info(
            f"   📍 Sequenced waypoints: {s.connecting_roads}/{s.total} on connecting roads"
        )
        logger.info(
            f"      {s.intersections} intersections, {s.midpoints} midpoints, "
            f"{s.nearest} nearest points, {s.without_roads} at square centre"
        )
    return result


def calculate_combined_bounds(
    squares: Sequence[Any], buffer_deg: float = 0.01
) -> Tuple[float, float, float, float]:
    """
    (south, west, north, east) box around all squares, padded by buffer_deg.

    This is the area the road-data collaborator should be asked for.

    Raises:
        ValueError: If squares is empty
    """
    if not squares:
        raise ValueError("cannot compute bounds of zero squares")
    rects = [_square_rect(sq) for sq in squares]
    south = min(r[0][0] for r in rects) - buffer_deg
    west = min(r[0][1] for r in rects) - buffer_deg
    north = max(r[1][0] for r in rects) + buffer_deg
    east = max(r[1][1] for r in rects) + buffer_deg
    return south, west, north, east
