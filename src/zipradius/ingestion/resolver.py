"""
Seed resolution: label -> coordinate.

The local reference dataset is consulted first; only labels it does not know go to the
geocoder. Resolution failures are reported per label so the search can continue with the
seeds that were found.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Protocol

from zipradius.catalog.loader import ReferenceDataset
from zipradius.domain.errors import UnresolvedSeedLabelError
from zipradius.domain.models import GeoPoint, Seed

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    def geocode_postcode(self, label: str) -> GeoPoint | None: ...


def parse_seed_labels(raw: str | Iterable[str]) -> list[str]:
    """Split comma-separated input into trimmed, non-empty labels (first occurrence wins)."""
    parts = raw.split(",") if isinstance(raw, str) else list(raw)
    out: list[str] = []
    seen: set[str] = set()
    for part in parts:
        label = str(part).strip()
        if not label or label in seen:
            continue
        seen.add(label)
        out.append(label)
    return out


@dataclass
class SeedResolution:
    seeds: list[Seed] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)


class SeedResolver:
    def __init__(self, dataset: ReferenceDataset, geocoder: Geocoder | None = None):
        self._dataset = dataset
        self._geocoder = geocoder

    def resolve(self, label: str) -> GeoPoint | None:
        record = self._dataset.get(label)
        if record is not None:
            return record.location
        if self._geocoder is None:
            return None
        return self._geocoder.geocode_postcode(label)

    def require(self, label: str) -> GeoPoint:
        """Like `resolve`, but raise `UnresolvedSeedLabelError` instead of returning None."""
        point = self.resolve(label)
        if point is None:
            raise UnresolvedSeedLabelError(label)
        return point

    def resolve_all(self, labels: Iterable[str]) -> SeedResolution:
        out = SeedResolution()
        for label in labels:
            point = self.resolve(label)
            if point is None:
                logger.warning("Seed '%s' could not be located; continuing with the others.", label)
                out.unresolved.append(label)
                continue
            out.seeds.append(Seed(label=label, location=point))
        return out
