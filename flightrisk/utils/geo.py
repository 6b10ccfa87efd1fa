from __future__ import annotations

import math
from typing import Any, Iterable, List, Optional, Tuple

from flightrisk.utils.numeric import coerce_finite

EARTH_RADIUS_KM = 6371.0

# visual arc: bulge grows 1 degree per 1500 km, never past 6 degrees
ARC_KM_PER_DEGREE = 1500.0
ARC_MAX_DEGREES = 6.0

LatLon = Tuple[float, float]


def as_latlon(point: Any) -> Optional[LatLon]:
    """Accept an Airport-like object (lat/lon attributes) or a (lat, lon) pair."""
    if point is None:
        return None
    if hasattr(point, "lat") and hasattr(point, "lon"):
        lat, lon = point.lat, point.lon
    else:
        try:
            lat, lon = point[0], point[1]
        except (TypeError, IndexError, KeyError):
            return None
    lat, lon = coerce_finite(lat), coerce_finite(lon)
    if lat is None or lon is None:
        return None
    return lat, lon


def haversine_distance_km(a: Any, b: Any) -> float:
    """Great-circle distance between two points in kilometers (haversine, R = 6371 km)."""
    pa, pb = as_latlon(a), as_latlon(b)
    if pa is None or pb is None:
        raise ValueError("Both points need finite lat/lon.")

    rlat1, rlon1 = math.radians(pa[0]), math.radians(pa[1])
    rlat2, rlon2 = math.radians(pb[0]), math.radians(pb[1])

    dlat = rlat2 - rlat1
    dlon = rlon2 - rlon1

    h = math.sin(dlat / 2) ** 2 + math.cos(rlat1) * math.cos(rlat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return EARTH_RADIUS_KM * c


def build_curved_route(a: Any, b: Any, steps: int = 48) -> List[LatLon]:
    """
    Points for drawing a route as an arc on the map: straight interpolation
    with a sine bulge added to latitude. Display only, never scored.
    Returns steps + 1 points with exact endpoints, or [] if an endpoint is missing.
    Raises ValueError when steps < 1.
    """
    pa, pb = as_latlon(a), as_latlon(b)
    if pa is None or pb is None:
        return []
    steps = int(steps)
    if steps < 1:
        raise ValueError(f"steps must be >= 1, got {steps}")

    amplitude = min(ARC_MAX_DEGREES, haversine_distance_km(pa, pb) / ARC_KM_PER_DEGREE)

    points: List[LatLon] = [pa]
    for i in range(1, steps):
        t = i / steps
        lat = pa[0] + (pb[0] - pa[0]) * t + math.sin(math.pi * t) * amplitude
        lon = pa[1] + (pb[1] - pa[1]) * t
        points.append((lat, lon))
    points.append(pb)
    return points


def bounding_box(points: Iterable[Any], pad_deg: float = 0.0) -> Optional[Tuple[LatLon, LatLon]]:
    """((min_lat, min_lon), (max_lat, max_lon)) around the points, or None if there are none."""
    coords = [p for p in (as_latlon(x) for x in points) if p is not None]
    if not coords:
        return None
    lats = [p[0] for p in coords]
    lons = [p[1] for p in coords]
    return (
        (max(-90.0, min(lats) - pad_deg), min(lons) - pad_deg),
        (min(90.0, max(lats) + pad_deg), max(lons) + pad_deg),
    )
