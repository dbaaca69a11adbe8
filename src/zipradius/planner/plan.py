from __future__ import annotations

# Orchestrates one search run:
# - request parsing + per-request settings overrides
# - seed resolution (dataset first, geocoder fallback)
# - layout decision, radius search, per-viewport bounds/zoom, circle rings
#
# The geometry/layout modules stay pure; this file is the only place that reads settings
# and talks to collaborators.

import logging
import time
from datetime import datetime, timezone
from typing import Sequence

from zipradius.catalog.loader import ReferenceDataset
from zipradius.config.overrides import apply_settings_overrides
from zipradius.config.settings import Settings, get_settings
from zipradius.core.cache import FileCache
from zipradius.core.env import resolve_project_path
from zipradius.core.geo import circle_polygon
from zipradius.domain.errors import EmptySeedSetError
from zipradius.domain.models import (
    LayoutRequest,
    LayoutResponse,
    SearchRequest,
    SearchResponse,
    Seed,
    SeedCircle,
    Viewport,
    ViewportMode,
    ViewportPlan,
)
from zipradius.ingestion.resolver import Geocoder, SeedResolver, parse_seed_labels
from zipradius.layout.bounds import bounds_for, zoom_for_bounds
from zipradius.layout.viewport import decide_layout, viewport_groups
from zipradius.search.radius import search_radius, summarize

logger = logging.getLogger(__name__)


def build_cache(settings: Settings) -> FileCache:
    return FileCache(
        resolve_project_path(settings.cache.dir),
        enabled=settings.cache.enabled,
        default_ttl_seconds=settings.cache.default_ttl_seconds,
    )


def _effective_radius(radius_mi: float | None, settings: Settings) -> float:
    radius = float(settings.search.default_radius_mi if radius_mi is None else radius_mi)
    lo, hi = settings.search.min_radius_mi, settings.search.max_radius_mi
    if not (lo <= radius <= hi):
        raise ValueError(f"radius_mi must be between {lo:g} and {hi:g} miles (got {radius:g})")
    return radius


def _effective_mode(mode: ViewportMode | None, settings: Settings) -> ViewportMode:
    return mode or settings.layout.default_mode


def build_viewports(plan: ViewportPlan, seeds: Sequence[Seed], radius_mi: float, settings: Settings) -> list[Viewport]:
    """One viewport per map surface of `plan`, each fitted to its own seeds' circles."""
    cfg = settings.bounds
    out: list[Viewport] = []
    for group in viewport_groups(plan, seeds):
        box = bounds_for(group, radius_mi, cfg.padding_fraction, miles_per_degree=cfg.miles_per_degree)
        zoom = zoom_for_bounds(box, cfg.viewport_width_px, cfg.viewport_height_px, cfg.max_zoom)
        out.append(Viewport(seeds=list(group), bounds=box, zoom=zoom))
    return out


def build_circles(seeds: Sequence[Seed], radius_mi: float, settings: Settings) -> list[SeedCircle]:
    n = settings.circle.point_count
    return [
        SeedCircle(label=s.label, radius_mi=radius_mi, ring=circle_polygon(s.location, radius_mi, n))
        for s in seeds
    ]


def plan_layout(request: LayoutRequest, *, settings: Settings | None = None) -> LayoutResponse:
    """Layout-only run for seeds whose coordinates the caller already knows."""
    settings = apply_settings_overrides(settings or get_settings(), request.settings_overrides)
    radius = _effective_radius(request.radius_mi, settings)
    mode = _effective_mode(request.mode, settings)

    plan = decide_layout(
        request.seeds,
        mode,
        settings.layout.cluster_threshold_mi,
        split_fraction=settings.layout.split_fraction,
    )
    return LayoutResponse(
        plan=plan,
        viewports=build_viewports(plan, request.seeds, radius, settings),
        circles=build_circles(request.seeds, radius, settings),
    )


def plan_search(
    request: SearchRequest,
    *,
    dataset: ReferenceDataset,
    settings: Settings | None = None,
    geocoder: Geocoder | None = None,
) -> SearchResponse:
    """Resolve seeds, search the dataset, and decide/fit the map layout.

    Raises:
        ValueError: invalid radius/overrides, or no seed labels in the request.
        EmptySeedSetError: none of the requested seeds could be located.
    """
    started = time.monotonic()
    settings = apply_settings_overrides(settings or get_settings(), request.settings_overrides)
    radius = _effective_radius(request.radius_mi, settings)
    mode = _effective_mode(request.mode, settings)

    labels = parse_seed_labels(request.seeds)
    if not labels:
        raise ValueError("Enter at least one seed label (comma-separated).")

    resolution = SeedResolver(dataset, geocoder).resolve_all(labels)
    if not resolution.seeds:
        raise EmptySeedSetError(f"None of the requested seeds could be located: {', '.join(labels)}")
    seeds = resolution.seeds

    plan = decide_layout(
        seeds,
        mode,
        settings.layout.cluster_threshold_mi,
        split_fraction=settings.layout.split_fraction,
    )

    index = dataset.index(settings.search.index_cell_size_deg) if settings.search.use_spatial_index else None
    result = search_radius(seeds, dataset.records, radius, index=index)
    summary = summarize(result)

    elapsed_ms = int((time.monotonic() - started) * 1000)
    logger.info(
        "Search complete: %d matches within %g mi of %d seed(s) (%s plan, %d ms)",
        summary.match_count,
        radius,
        len(seeds),
        plan.kind,
        elapsed_ms,
    )
    return SearchResponse(
        generated_at=datetime.now(timezone.utc),
        query=request,
        seeds=seeds,
        unresolved=resolution.unresolved,
        matches=result.records(),
        summary=summary,
        plan=plan,
        viewports=build_viewports(plan, seeds, radius, settings),
        circles=build_circles(seeds, radius, settings),
        meta={
            "elapsed_ms": elapsed_ms,
            "radius_mi": radius,
            "mode": mode,
            "cluster_threshold_mi": settings.layout.cluster_threshold_mi,
            "dataset_records": len(dataset),
        },
    )
