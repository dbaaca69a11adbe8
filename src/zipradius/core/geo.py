from __future__ import annotations

from math import asin, atan2, cos, degrees, radians, sin, sqrt

from zipradius.domain.errors import InvalidCoordinateError
from zipradius.domain.models import GeoPoint

"""
Spherical geometry helpers.

Everything is measured in statute miles on a sphere with the mean Earth radius, so the
distance check in the radius search and the rings drawn by `circle_polygon` agree.
"""

EARTH_RADIUS_MI = 3959.0


def validated_point(lat: float, lon: float) -> GeoPoint:
    """Build a `GeoPoint`, raising `InvalidCoordinateError` for out-of-range or non-numeric input."""
    try:
        return GeoPoint(lat=float(lat), lon=float(lon))
    except (TypeError, ValueError) as exc:
        raise InvalidCoordinateError(lat, lon) from exc


def haversine_mi(a: GeoPoint, b: GeoPoint) -> float:
    """Compute great-circle distance in miles between two points."""
    lat1 = radians(a.lat)
    lon1 = radians(a.lon)
    lat2 = radians(b.lat)
    lon2 = radians(b.lon)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_MI * asin(min(1.0, sqrt(h)))


def initial_bearing_deg(a: GeoPoint, b: GeoPoint) -> float:
    """Initial great-circle bearing from `a` to `b` (0 = north, clockwise, [0, 360))."""
    lat1 = radians(a.lat)
    lat2 = radians(b.lat)
    dlon = radians(b.lon - a.lon)
    x = sin(dlon) * cos(lat2)
    y = cos(lat1) * sin(lat2) - sin(lat1) * cos(lat2) * cos(dlon)
    return (degrees(atan2(x, y)) + 360.0) % 360.0


def _wrap_lon(lon: float) -> float:
    wrapped = (lon + 540.0) % 360.0 - 180.0
    # Keep +180 instead of folding it to -180 when the input was exactly on the antimeridian.
    return 180.0 if wrapped == -180.0 and lon > 0 else wrapped


def destination_point(origin: GeoPoint, distance_mi: float, bearing_deg: float) -> GeoPoint:
    """Point reached by travelling `distance_mi` along a great circle at `bearing_deg` from `origin`."""
    delta = float(distance_mi) / EARTH_RADIUS_MI
    theta = radians(bearing_deg)
    lat1 = radians(origin.lat)
    lon1 = radians(origin.lon)

    sin_lat2 = sin(lat1) * cos(delta) + cos(lat1) * sin(delta) * cos(theta)
    lat2 = asin(max(-1.0, min(1.0, sin_lat2)))
    lon2 = lon1 + atan2(
        sin(theta) * sin(delta) * cos(lat1),
        cos(delta) - sin(lat1) * sin(lat2),
    )
    return GeoPoint(lat=max(-90.0, min(90.0, degrees(lat2))), lon=_wrap_lon(degrees(lon2)))


def circle_polygon(center: GeoPoint, radius_mi: float, point_count: int = 64) -> list[GeoPoint]:
    """Closed ring of `point_count` points (plus the repeated first point) at `radius_mi` around `center`.

    Uses the forward geodesic formula per bearing, so rings stay round at any latitude.
    A radius <= 0 yields a zero-area ring where every point equals `center`.
    """
    if int(point_count) < 3:
        raise ValueError("point_count must be >= 3")
    n = int(point_count)

    if radius_mi <= 0:
        return [center] * (n + 1)

    ring = [destination_point(center, radius_mi, i * 360.0 / n) for i in range(n)]
    ring.append(ring[0])
    return ring
