"""Turn cluster centers into per-person top-left coordinates."""

from __future__ import annotations

from typing import Dict, Iterable, Mapping

from .clusters import ClusterIndex
from .config import DEFAULT_CONFIG, LayoutConfig
from .schemas import Cluster, Point

Positions = Dict[str, Point]


def expand_clusters(
    centers: Mapping[str, Point],
    clusters: ClusterIndex,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> Positions:
    """One point per member, left to right from the cluster's left edge."""

    people: Positions = {}
    for cluster in clusters:
        center = centers.get(cluster.id)
        if center is None:
            continue
        start_x = center.x - cluster.width / 2
        top = center.y - cluster.height / 2
        for index, member in enumerate(cluster.members):
            people[member.id] = Point(start_x + index * config.member_stride, top)
    return people


def orphan_row_y(centers: Mapping[str, Point], clusters: ClusterIndex, config: LayoutConfig = DEFAULT_CONFIG) -> float:
    """Top of the overflow row: below the deepest ranked cluster by ``orphan_gap``."""
    bottom = max(
        (center.y + clusters[cid].height / 2 for cid, center in centers.items()),
        default=0.0,
    )
    return max(bottom, 0.0) + config.orphan_gap


def place_orphans(orphans: Iterable[Cluster], top: float, config: LayoutConfig = DEFAULT_CONFIG) -> Positions:
    """Lay orphan clusters out in a single row starting at the margin."""

    people: Positions = {}
    cursor = config.margin
    for cluster in orphans:
        for index, member in enumerate(cluster.members):
            people[member.id] = Point(cursor + index * config.member_stride, top)
        cursor += cluster.width + config.node_sep
    return people


def normalize(positions: Mapping[str, Point], margin: float = DEFAULT_CONFIG.margin) -> Positions:
    """Translate everything so the smallest x and y both equal ``margin``."""

    if not positions:
        return {}
    dx = margin - min(point.x for point in positions.values())
    dy = margin - min(point.y for point in positions.values())
    return {pid: point.shifted(dx, dy) for pid, point in positions.items()}


__all__ = ["expand_clusters", "orphan_row_y", "place_orphans", "normalize"]
