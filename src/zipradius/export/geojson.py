"""
GeoJSON builders for map renderers.

Coordinates are emitted as `[lon, lat]` pairs (GeoJSON order). Rings come straight from
`circle_polygon`, so they are already closed.
"""

from __future__ import annotations

from typing import Any, Sequence

from zipradius.core.geo import circle_polygon
from zipradius.domain.models import GeoPoint, ReferenceRecord, Seed


def _coords(ring: Sequence[GeoPoint]) -> list[list[float]]:
    return [[p.lon, p.lat] for p in ring]


def circles_feature_collection(
    seeds: Sequence[Seed],
    radius_mi: float,
    point_count: int = 64,
) -> dict[str, Any]:
    """One Polygon feature per seed, tagged with the seed label and its position in the input."""
    features = []
    for i, seed in enumerate(seeds):
        ring = circle_polygon(seed.location, radius_mi, point_count)
        features.append(
            {
                "type": "Feature",
                "geometry": {"type": "Polygon", "coordinates": [_coords(ring)]},
                "properties": {"seed": seed.label, "seed_index": i, "radius_mi": float(radius_mi)},
            }
        )
    return {"type": "FeatureCollection", "features": features}


def matches_feature_collection(records: Sequence[ReferenceRecord]) -> dict[str, Any]:
    """One Point feature per matched record, carrying label and population."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [r.location.lon, r.location.lat]},
                "properties": {"label": r.label, "weight": r.weight},
            }
            for r in records
        ],
    }
