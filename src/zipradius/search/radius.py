"""
Radius search over the reference dataset.

A record matches when it lies within the radius (closed interval) of at least one seed;
a record matched by several seeds appears once in the result.
"""

from __future__ import annotations

import logging
from typing import Sequence

from zipradius.core.geo import haversine_mi
from zipradius.core.spatial_index import SpatialGridIndex
from zipradius.domain.models import ReferenceRecord, SearchResult, SearchSummary, Seed

logger = logging.getLogger(__name__)


def build_index(records: Sequence[ReferenceRecord], *, cell_size_deg: float = 0.5) -> SpatialGridIndex[ReferenceRecord]:
    """Bucket `records` into a grid index for repeated radius queries."""
    return SpatialGridIndex(records, get_point=lambda r: r.location, cell_size_deg=cell_size_deg)


def search_radius(
    seeds: Sequence[Seed],
    records: Sequence[ReferenceRecord],
    radius_mi: float,
    *,
    index: SpatialGridIndex[ReferenceRecord] | None = None,
) -> SearchResult:
    """Return every record within `radius_mi` of any seed, deduplicated by label.

    `index` must have been built from `records`; it only narrows the candidates.
    """
    if radius_mi < 0:
        raise ValueError("radius_mi must be >= 0")

    matches: dict[str, ReferenceRecord] = {}
    for seed in seeds:
        if index is not None:
            found = index.query_within(center=seed.location, radius_mi=radius_mi)
        else:
            found = [r for r in records if haversine_mi(seed.location, r.location) <= radius_mi]
        for record in found:
            matches.setdefault(record.label, record)

    logger.debug("Radius search: seeds=%d radius=%.2fmi matches=%d", len(seeds), radius_mi, len(matches))
    return SearchResult(matches=matches)


def summarize(result: SearchResult) -> SearchSummary:
    count = len(result)
    total = sum(r.weight for r in result.matches.values())
    return SearchSummary(
        match_count=count,
        total_weight=total,
        average_weight=(total / count) if count else 0.0,
    )


def label_list(result: SearchResult, *, separator: str = ", ") -> str:
    """Sorted matched labels as one string (ready to paste elsewhere)."""
    return separator.join(result.labels())
