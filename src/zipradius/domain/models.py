"""
Domain models (Pydantic).

These types are the stable "contract" between layers:
- geometry values (`GeoPoint`, `BoundingBox`)
- search inputs/outputs (`Seed`, `ReferenceRecord`, `SearchResult`)
- the layout decision (`ViewportPlan`: single / split / grid)
- API/CLI payloads (`SearchRequest`, `SearchResponse`, `LayoutRequest`, `LayoutResponse`)

Everything the geometry/layout code returns is plain data; turning a plan into actual map
surfaces is the caller's job.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

ViewportMode = Literal["auto", "single", "split"]


class GeoPoint(BaseModel):
    """A geographic point in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class Seed(BaseModel):
    """A user-supplied anchor location, identified by the label it was requested with."""

    model_config = ConfigDict(frozen=True)

    label: str
    location: GeoPoint


class ReferenceRecord(BaseModel):
    """One searchable dataset entry (a postal code with its centroid and population)."""

    model_config = ConfigDict(frozen=True)

    label: str
    location: GeoPoint
    weight: float = Field(0, ge=0)
    metadata: dict[str, Any] = Field(default_factory=dict)


class Cluster(BaseModel):
    """Seeds connected through a chain of pairwise distances within the threshold."""

    model_config = ConfigDict(frozen=True)

    seeds: tuple[Seed, ...] = Field(..., min_length=1)

    @property
    def size(self) -> int:
        return len(self.seeds)

    @property
    def labels(self) -> list[str]:
        return [s.label for s in self.seeds]

    @property
    def center(self) -> GeoPoint:
        """Arithmetic mean of member coordinates."""
        n = len(self.seeds)
        return GeoPoint(
            lat=sum(s.location.lat for s in self.seeds) / n,
            lon=sum(s.location.lon for s in self.seeds) / n,
        )


class SingleMap(BaseModel):
    """One combined map for every seed."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["single"] = "single"
    max_internal_distance_mi: float = Field(0, ge=0)


class SplitTwoWay(BaseModel):
    """Two maps divided by a split line; each side shows one cluster."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["split"] = "split"
    # Raw rotation of the split line (perpendicular to the seed-pair line); 0 for cluster splits.
    angle_degrees: float = 0
    split_fraction: float = Field(0.5, gt=0, lt=1)
    distance_mi: float = Field(0, ge=0)
    clusters: tuple[Cluster, Cluster]


class Grid(BaseModel):
    """One map cell per seed."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["grid"] = "grid"
    seeds: tuple[Seed, ...]


ViewportPlan = Annotated[Union[SingleMap, SplitTwoWay, Grid], Field(discriminator="kind")]


class BoundingBox(BaseModel):
    """An axis-aligned lat/lon box (degrees)."""

    model_config = ConfigDict(frozen=True)

    south: float
    west: float
    north: float
    east: float

    @property
    def center(self) -> GeoPoint:
        return GeoPoint(lat=(self.south + self.north) / 2, lon=(self.west + self.east) / 2)

    @property
    def lat_span(self) -> float:
        return self.north - self.south

    @property
    def lon_span(self) -> float:
        return self.east - self.west


class SearchResult(BaseModel):
    """Matched reference records keyed by label (union across seeds, deduplicated)."""

    matches: dict[str, ReferenceRecord] = Field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.matches)

    def __contains__(self, label: object) -> bool:
        return label in self.matches

    def labels(self) -> list[str]:
        return sorted(self.matches)

    def records(self) -> list[ReferenceRecord]:
        """Matched records sorted by label (deterministic order)."""
        return [self.matches[label] for label in self.labels()]


class SearchSummary(BaseModel):
    match_count: int = Field(..., ge=0)
    total_weight: float = Field(..., ge=0)
    average_weight: float = Field(..., ge=0)


class DatasetStats(BaseModel):
    """Aggregate facts about the loaded reference dataset."""

    total_records: int = Field(0, ge=0)
    total_weight: float = Field(0, ge=0)
    average_weight: float = Field(0, ge=0)
    states: int = Field(0, ge=0)
    counties: int = Field(0, ge=0)
    generated_at: str | None = None


class Viewport(BaseModel):
    """One rendered map surface: which seeds it shows and the box/zoom that fits their circles."""

    seeds: list[Seed]
    bounds: BoundingBox
    zoom: float = Field(..., ge=0)


class SeedCircle(BaseModel):
    """Closed ring approximating the search radius around one seed."""

    label: str
    radius_mi: float = Field(..., ge=0)
    ring: list[GeoPoint]


class SearchRequest(BaseModel):
    """End-user search payload: seed labels (list or comma-separated string) and a radius."""

    seeds: list[str] | str
    radius_mi: float | None = Field(default=None, ge=0)
    mode: ViewportMode | None = None
    settings_overrides: dict[str, Any] | None = None


class SearchResponse(BaseModel):
    generated_at: datetime
    query: SearchRequest
    seeds: list[Seed]
    unresolved: list[str] = Field(default_factory=list)
    matches: list[ReferenceRecord]
    summary: SearchSummary
    plan: ViewportPlan
    viewports: list[Viewport]
    circles: list[SeedCircle]
    meta: dict[str, Any] = Field(default_factory=dict)


class LayoutRequest(BaseModel):
    """Layout-only payload: seeds with known coordinates (no dataset lookup)."""

    seeds: list[Seed] = Field(..., min_length=1)
    radius_mi: float | None = Field(default=None, ge=0)
    mode: ViewportMode | None = None
    settings_overrides: dict[str, Any] | None = None


class LayoutResponse(BaseModel):
    plan: ViewportPlan
    viewports: list[Viewport]
    circles: list[SeedCircle]
