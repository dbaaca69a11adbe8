"""
Bounds + zoom helpers.

`bounds_for` boxes every seed's radius circle (plus padding) so a map fitted to the box
shows each circle completely. The radius-to-degrees conversion is the usual
"~69 miles per degree" approximation; the padding absorbs the longitude stretch at
mid-latitudes.

`zoom_for_bounds` turns a box into a Web-Mercator zoom level for a given viewport size.
"""

from __future__ import annotations

import math
from typing import Sequence

from zipradius.domain.errors import EmptySeedSetError
from zipradius.domain.models import BoundingBox, Seed

MILES_PER_DEGREE = 69.0
TILE_SIZE_PX = 256
# Web-Mercator cuts off here; tan() blows up at the poles.
MERCATOR_MAX_LAT = 85.05112878


def bounds_for(
    seeds: Sequence[Seed],
    radius_mi: float,
    padding_fraction: float = 0.1,
    *,
    miles_per_degree: float = MILES_PER_DEGREE,
) -> BoundingBox:
    """Box containing every seed expanded by `radius_mi`, inflated by `padding_fraction` per axis."""
    if not seeds:
        raise EmptySeedSetError("bounds_for requires at least one seed")
    if radius_mi < 0:
        raise ValueError("radius_mi must be >= 0")
    if padding_fraction < 0:
        raise ValueError("padding_fraction must be >= 0")

    radius_deg = float(radius_mi) / float(miles_per_degree)
    south = min(s.location.lat for s in seeds) - radius_deg
    north = max(s.location.lat for s in seeds) + radius_deg
    west = min(s.location.lon for s in seeds) - radius_deg
    east = max(s.location.lon for s in seeds) + radius_deg

    lat_pad = (north - south) * padding_fraction
    lon_pad = (east - west) * padding_fraction
    return BoundingBox(
        south=max(-90.0, south - lat_pad),
        west=west - lon_pad,
        north=min(90.0, north + lat_pad),
        east=east + lon_pad,
    )


def _mercator_y(lat: float) -> float:
    lat = max(-MERCATOR_MAX_LAT, min(MERCATOR_MAX_LAT, lat))
    return math.asinh(math.tan(math.radians(lat)))


def zoom_for_bounds(
    bounds: BoundingBox,
    width_px: int = 1024,
    height_px: int = 768,
    max_zoom: float = 22.0,
) -> float:
    """Largest zoom (2-decimal, rounded down) at which `bounds` fits in a `width_px` x `height_px` map."""
    if width_px <= 0 or height_px <= 0:
        raise ValueError("viewport size must be positive")

    lon_fraction = bounds.lon_span / 360.0
    lat_fraction = (_mercator_y(bounds.north) - _mercator_y(bounds.south)) / (2 * math.pi)

    fits: list[float] = []
    if lon_fraction > 0:
        fits.append(math.log2(width_px / TILE_SIZE_PX / lon_fraction))
    if lat_fraction > 0:
        fits.append(math.log2(height_px / TILE_SIZE_PX / lat_fraction))
    if not fits:
        return float(max_zoom)

    zoom = max(0.0, min(float(max_zoom), min(fits)))
    return math.floor(zoom * 100) / 100
