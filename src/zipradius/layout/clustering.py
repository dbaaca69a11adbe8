"""
Seed clustering.

Two seeds are linked when their distance is within the threshold; clusters are the
connected components of that proximity graph (union-find). A chain A-B-C therefore
forms one cluster even when A and C alone are farther apart than the threshold.

Output order is stable: clusters are ordered by their first seed in the input, and each
cluster keeps its seeds in input order.
"""

from __future__ import annotations

from itertools import combinations
from typing import Sequence

from zipradius.core.geo import haversine_mi
from zipradius.domain.models import Cluster, Seed

CLUSTER_THRESHOLD_MI = 30.0


class _DisjointSet:
    def __init__(self, n: int):
        self._parent = list(range(n))
        self._rank = [0] * n

    def find(self, i: int) -> int:
        root = i
        while self._parent[root] != root:
            root = self._parent[root]
        while self._parent[i] != root:
            self._parent[i], i = root, self._parent[i]
        return root

    def union(self, a: int, b: int) -> None:
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return
        if self._rank[ra] < self._rank[rb]:
            ra, rb = rb, ra
        self._parent[rb] = ra
        if self._rank[ra] == self._rank[rb]:
            self._rank[ra] += 1


def cluster_seeds(seeds: Sequence[Seed], threshold_mi: float = CLUSTER_THRESHOLD_MI) -> list[Cluster]:
    """Partition `seeds` into clusters connected by pairwise distances <= `threshold_mi`."""
    if threshold_mi <= 0:
        raise ValueError("threshold_mi must be > 0")

    n = len(seeds)
    groups = _DisjointSet(n)
    for i, j in combinations(range(n), 2):
        if haversine_mi(seeds[i].location, seeds[j].location) <= threshold_mi:
            groups.union(i, j)

    members: dict[int, list[Seed]] = {}
    for i, seed in enumerate(seeds):
        members.setdefault(groups.find(i), []).append(seed)
    # dicts keep insertion order, so clusters follow their first seed's position.
    return [Cluster(seeds=tuple(group)) for group in members.values()]


def max_internal_distance_mi(cluster: Cluster) -> float:
    """Largest pairwise distance between members (0 for a single-seed cluster)."""
    return max(
        (haversine_mi(a.location, b.location) for a, b in combinations(cluster.seeds, 2)),
        default=0.0,
    )
