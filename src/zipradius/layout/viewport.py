"""
Viewport layout decision.

Given the located seeds and a user-selected mode, pick exactly one plan:

- 1 seed                       -> single map
- 2 seeds, mode=single         -> single map (reports the pair distance)
- 2 seeds, mode=split          -> two-way split
- 2 seeds, mode=auto           -> single map when closer than the threshold, else split
- 3+ seeds, mode=single        -> single map (internal distance not computed)
- 3+ seeds, mode=auto          -> cluster: 1 cluster -> single, 2 -> split by cluster, more -> grid
- 3+ seeds, mode=split         -> grid (a two-way split does not generalize past two sides)

The function is pure: same seeds + mode + threshold always give an equal plan.
"""

from __future__ import annotations

import math
from typing import Sequence

from zipradius.core.geo import haversine_mi
from zipradius.domain.errors import EmptySeedSetError
from zipradius.domain.models import (
    Cluster,
    Grid,
    Seed,
    SingleMap,
    SplitTwoWay,
    ViewportMode,
    ViewportPlan,
)
from zipradius.layout.clustering import CLUSTER_THRESHOLD_MI, cluster_seeds, max_internal_distance_mi

SPLIT_FRACTION = 0.5
VIEWPORT_MODES: tuple[str, ...] = ("auto", "single", "split")


def split_line_angle_deg(a: Seed, b: Seed) -> float:
    """Rotation of the line dividing two seeds' maps, in degrees.

    This is the direction of the a->b line in the (lon, lat) plane, measured
    counter-clockwise from east, plus 90 degrees: the divider runs perpendicular to the
    seed pair. Renderers map it onto their own rotation convention.
    """
    dx = b.location.lon - a.location.lon
    dy = b.location.lat - a.location.lat
    return math.degrees(math.atan2(dy, dx) + math.pi / 2)


def _two_seed_split(a: Seed, b: Seed, distance_mi: float, split_fraction: float) -> SplitTwoWay:
    return SplitTwoWay(
        angle_degrees=split_line_angle_deg(a, b),
        split_fraction=split_fraction,
        distance_mi=distance_mi,
        clusters=(Cluster(seeds=(a,)), Cluster(seeds=(b,))),
    )


def decide_layout(
    seeds: Sequence[Seed],
    mode: ViewportMode = "auto",
    cluster_threshold_mi: float = CLUSTER_THRESHOLD_MI,
    *,
    split_fraction: float = SPLIT_FRACTION,
) -> ViewportPlan:
    """Decide how many maps to show and how to divide the seeds between them.

    Raises:
        EmptySeedSetError: if `seeds` is empty.
        ValueError: on an unknown mode or a non-positive threshold.
    """
    if not seeds:
        raise EmptySeedSetError("decide_layout requires at least one seed")
    if mode not in VIEWPORT_MODES:
        raise ValueError(f"Unknown viewport mode '{mode}'; expected one of {', '.join(VIEWPORT_MODES)}")
    if cluster_threshold_mi <= 0:
        raise ValueError("cluster_threshold_mi must be > 0")

    if len(seeds) == 1:
        return SingleMap(max_internal_distance_mi=0)

    if len(seeds) == 2:
        a, b = seeds
        distance = haversine_mi(a.location, b.location)
        if mode == "single":
            return SingleMap(max_internal_distance_mi=distance)
        if mode == "split" or distance >= cluster_threshold_mi:
            return _two_seed_split(a, b, distance, split_fraction)
        return SingleMap(max_internal_distance_mi=distance)

    if mode == "single":
        return SingleMap(max_internal_distance_mi=0)

    if mode == "auto":
        clusters = cluster_seeds(seeds, cluster_threshold_mi)
        if len(clusters) == 1:
            return SingleMap(max_internal_distance_mi=max_internal_distance_mi(clusters[0]))
        if len(clusters) == 2:
            first, second = clusters
            return SplitTwoWay(
                angle_degrees=0,
                split_fraction=split_fraction,
                distance_mi=haversine_mi(first.center, second.center),
                clusters=(first, second),
            )

    return Grid(seeds=tuple(seeds))


def viewport_groups(plan: ViewportPlan, seeds: Sequence[Seed]) -> list[list[Seed]]:
    """Seeds shown on each map surface of `plan` (one list per surface)."""
    if isinstance(plan, SingleMap):
        return [list(seeds)]
    if isinstance(plan, SplitTwoWay):
        return [list(c.seeds) for c in plan.clusters]
    return [[s] for s in plan.seeds]
