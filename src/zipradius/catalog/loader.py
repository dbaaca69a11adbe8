"""
Reference dataset loader.

The dataset is a local JSON file (default: `data/zipCodeDatabase.json`) in the shape
produced by `scripts/zipcodes_import.py`:

    {"zipCodes": [{"zipCode": "10001", "lat": 40.75, "lng": -73.99, "population": 25026, ...}],
     "stats": {"generatedAt": "...", ...}}

A bare JSON array of rows is accepted too. Rows are validated into `ReferenceRecord`s;
rows with missing/out-of-range coordinates are skipped (and counted in a warning) so one
bad line does not take the whole table down. Everything besides label, coordinates and
population is carried through as record metadata.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from zipradius.core.env import resolve_project_path
from zipradius.core.geo import validated_point
from zipradius.core.spatial_index import SpatialGridIndex
from zipradius.domain.errors import InvalidCoordinateError
from zipradius.domain.models import DatasetStats, ReferenceRecord
from zipradius.search.radius import build_index

logger = logging.getLogger(__name__)


class _ZipCodeRow(BaseModel):
    model_config = ConfigDict(extra="allow")

    zip_code: str = Field(validation_alias=AliasChoices("zipCode", "zip", "label"))
    lat: float
    lon: float = Field(validation_alias=AliasChoices("lng", "lon"))
    population: float | None = Field(default=None, validation_alias=AliasChoices("population", "weight"))

    @field_validator("zip_code", mode="before")
    @classmethod
    def _coerce_label(cls, v: Any) -> Any:
        if isinstance(v, int):
            return f"{v:05d}"
        return v.strip() if isinstance(v, str) else v


@dataclass
class ReferenceDataset:
    """The loaded, read-only reference set plus a label lookup."""

    records: list[ReferenceRecord]
    stats: DatasetStats
    _by_label: dict[str, ReferenceRecord] = field(init=False, repr=False)
    _indexes: dict[float, SpatialGridIndex[ReferenceRecord]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._by_label = {}
        for r in self.records:
            self._by_label.setdefault(r.label, r)
        self._indexes = {}

    def __len__(self) -> int:
        return len(self.records)

    def get(self, label: str) -> ReferenceRecord | None:
        return self._by_label.get(label)

    def index(self, cell_size_deg: float = 0.5) -> SpatialGridIndex[ReferenceRecord]:
        """Grid index over the records (built once per cell size)."""
        key = float(cell_size_deg)
        if key not in self._indexes:
            self._indexes[key] = build_index(self.records, cell_size_deg=key)
        return self._indexes[key]

    @classmethod
    def from_records(cls, records: Iterable[ReferenceRecord], *, generated_at: str | None = None) -> "ReferenceDataset":
        items = list(records)
        return cls(records=items, stats=compute_stats(items, generated_at=generated_at))


def compute_stats(records: list[ReferenceRecord], *, generated_at: str | None = None) -> DatasetStats:
    total = sum(r.weight for r in records)
    states = {r.metadata.get("state") for r in records if r.metadata.get("state")}
    counties = {
        (r.metadata.get("state"), r.metadata.get("countyName"))
        for r in records
        if r.metadata.get("countyName")
    }
    return DatasetStats(
        total_records=len(records),
        total_weight=total,
        average_weight=round(total / len(records), 2) if records else 0.0,
        states=len(states),
        counties=len(counties),
        generated_at=generated_at,
    )


def parse_records(rows: Iterable[Any]) -> list[ReferenceRecord]:
    """Validate raw dataset rows into records, skipping unusable ones."""
    out: list[ReferenceRecord] = []
    skipped = 0
    for raw in rows:
        try:
            row = _ZipCodeRow.model_validate(raw)
            location = validated_point(row.lat, row.lon)
        except (ValidationError, InvalidCoordinateError):
            skipped += 1
            continue
        out.append(
            ReferenceRecord(
                label=row.zip_code,
                location=location,
                weight=max(0.0, row.population or 0.0),
                metadata=dict(row.model_extra or {}),
            )
        )
    if skipped:
        logger.warning("Skipped %d dataset rows without a usable label/coordinate.", skipped)
    return out


def load_reference_dataset(path: str | Path) -> ReferenceDataset:
    """Load and validate a reference dataset JSON file."""
    resolved = resolve_project_path(path)
    payload = json.loads(resolved.read_text(encoding="utf-8"))

    generated_at: str | None = None
    if isinstance(payload, dict):
        rows = payload.get("zipCodes")
        stats = payload.get("stats")
        if isinstance(stats, dict) and stats.get("generatedAt"):
            generated_at = str(stats["generatedAt"])
    else:
        rows = payload
    if not isinstance(rows, list):
        raise ValueError(f"Unsupported dataset shape in {resolved}: expected a list or an object with 'zipCodes'.")

    dataset = ReferenceDataset.from_records(parse_records(rows), generated_at=generated_at)
    logger.info("Loaded %d reference records from %s", len(dataset), resolved)
    return dataset
