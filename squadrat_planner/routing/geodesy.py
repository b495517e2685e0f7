#!/usr/bin/env python3
"""
Squadrat Planner - Geodesy Helpers

Great-circle distances and midpoints on a sphere of mean Earth radius
(6371.0088 km), via pyproj.Geod. Points are duck-typed: anything with
.lat/.lon attributes, a {"lat", "lon"} dict, or a (lat, lon) tuple.
"""

from typing import Any, Sequence, Tuple

import numpy as np
from pyproj import Geod

from squadrat_planner.models.grid_models import GeoPoint

EARTH_RADIUS_M = 6371008.8

_GEOD = Geod(a=EARTH_RADIUS_M, f=0.0)


def get_lat_lon(point: Any) -> Tuple[float, float]:
    """
    Get (lat, lon) from any supported point representation.

    Raises:
        TypeError: If the point has no recognizable coordinates
    """
    if hasattr(point, "lat") and hasattr(point, "lon"):
        return float(point.lat), float(point.lon)
    if isinstance(point, dict):
        return float(point["lat"]), float(point["lon"])
    if isinstance(point, (tuple, list)) and len(point) == 2:
        return float(point[0]), float(point[1])
    raise TypeError(f"cannot read lat/lon from {type(point).__name__}")


def to_geo_point(point: Any) -> GeoPoint:
    lat, lon = get_lat_lon(point)
    return GeoPoint(lat=lat, lon=lon)


def distance_km(a: Any, b: Any) -> float:
    """Great-circle distance between two points in kilometres."""
    lat1, lon1 = get_lat_lon(a)
    lat2, lon2 = get_lat_lon(b)
    _, _, dist_m = _GEOD.inv(lon1, lat1, lon2, lat2)
    return dist_m / 1000.0


def midpoint(a: Any, b: Any) -> GeoPoint:
    """Point halfway along the great circle from a to b."""
    lat1, lon1 = get_lat_lon(a)
    lat2, lon2 = get_lat_lon(b)
    azimuth, _, dist_m = _GEOD.inv(lon1, lat1, lon2, lat2)
    lon, lat, _ = _GEOD.fwd(lon1, lat1, azimuth, dist_m / 2.0)
    return GeoPoint(lat=lat, lon=lon)


def distance_matrix_km(points: Sequence[Any]) -> np.ndarray:
    """Symmetric (n × n) matrix of great-circle distances in kilometres."""
    n = len(points)
    if n == 0:
        return np.zeros((0, 0))
    coords = np.array([get_lat_lon(p) for p in points], dtype=float)
    lats, lons = coords[:, 0], coords[:, 1]
    rows, cols = np.triu_indices(n, k=1)
    matrix = np.zeros((n, n))
    if rows.size:
        _, _, dist_m = _GEOD.inv(lons[rows], lats[rows], lons[cols], lats[cols])
        matrix[rows, cols] = np.asarray(dist_m) / 1000.0
        matrix[cols, rows] = matrix[rows, cols]
    return matrix
