"""
Lightweight spatial indexing (lat/lon grid buckets) for the reference dataset.

The full US postcode table has ~33k rows; scanning all of them per seed is fine for a
handful of seeds but the grid keeps repeated searches cheap. Cells are fixed steps in
degrees, so the index works at any latitude; candidates are always confirmed with the
same haversine check the brute-force search uses, so results are identical.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Generic, Iterable, TypeVar

from zipradius.core.geo import EARTH_RADIUS_MI, haversine_mi
from zipradius.domain.models import GeoPoint

T = TypeVar("T")

# Cell-boundary slack (degrees) so points sitting exactly on an edge are never skipped.
_EDGE_EPS_DEG = 1e-9


@dataclass(frozen=True)
class _Entry(Generic[T]):
    item: T
    point: GeoPoint


class SpatialGridIndex(Generic[T]):
    def __init__(
        self,
        items: Iterable[T],
        *,
        get_point: Callable[[T], GeoPoint],
        cell_size_deg: float = 0.5,
    ):
        if not (0 < float(cell_size_deg) <= 90):
            raise ValueError("cell_size_deg must be in (0, 90]")
        # Snap steps so the rows/columns tile the globe exactly (wrapping stays consistent).
        self._n_rows = int(math.ceil(180.0 / float(cell_size_deg)))
        self._n_cols = int(math.ceil(360.0 / float(cell_size_deg)))
        self._lat_step = 180.0 / self._n_rows
        self._lon_step = 360.0 / self._n_cols
        self._cells: dict[tuple[int, int], list[_Entry[T]]] = {}
        self._size = 0

        for it in items:
            point = get_point(it)
            e = _Entry(item=it, point=point)
            self._cells.setdefault(self._cell_key(point.lat, point.lon), []).append(e)
            self._size += 1

    def __len__(self) -> int:
        return self._size

    def _row(self, lat: float) -> int:
        return max(0, min(self._n_rows - 1, int(math.floor((lat + 90.0) / self._lat_step))))

    def _col(self, lon: float) -> int:
        return int(math.floor((lon + 180.0) / self._lon_step)) % self._n_cols

    def _cell_key(self, lat: float, lon: float) -> tuple[int, int]:
        return self._row(lat), self._col(lon)

    def _candidate_cols(self, lon: float, dlon_deg: float | None) -> Iterable[int]:
        if dlon_deg is None:
            return range(self._n_cols)
        lo = int(math.floor((lon - dlon_deg - _EDGE_EPS_DEG + 180.0) / self._lon_step))
        hi = int(math.floor((lon + dlon_deg + _EDGE_EPS_DEG + 180.0) / self._lon_step))
        if hi - lo + 1 >= self._n_cols:
            return range(self._n_cols)
        return sorted({k % self._n_cols for k in range(lo, hi + 1)})

    def query_within(self, *, center: GeoPoint, radius_mi: float) -> list[T]:
        """Items whose point is within `radius_mi` (inclusive) of `center`."""
        r = float(radius_mi)
        if r < 0:
            return []

        delta = r / EARTH_RADIUS_MI
        dlat_deg = math.degrees(min(delta, math.pi))
        lat_lo = center.lat - dlat_deg - _EDGE_EPS_DEG
        lat_hi = center.lat + dlat_deg + _EDGE_EPS_DEG

        # Longitude half-width of the circle; None means every column (circle reaches a pole).
        dlon_deg: float | None = None
        if lat_lo > -90.0 and lat_hi < 90.0:
            s = math.sin(delta) / math.cos(math.radians(center.lat))
            if s < 1.0:
                dlon_deg = math.degrees(math.asin(s))

        out: list[T] = []
        cols = list(self._candidate_cols(center.lon, dlon_deg))
        for row in range(self._row(lat_lo), self._row(lat_hi) + 1):
            for col in cols:
                cell = self._cells.get((row, col))
                if not cell:
                    continue
                for e in cell:
                    if haversine_mi(center, e.point) <= r:
                        out.append(e.item)
        return out
