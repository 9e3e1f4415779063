"""Re-center parent clusters over the spouse they descend to, then separate collisions."""

from __future__ import annotations

from typing import Collection, Dict, List, Mapping, Tuple

import networkx as nx

from .clusters import ClusterIndex
from .config import DEFAULT_CONFIG, DEFAULT_RULES, LayoutConfig, LayoutRules
from .schemas import Cluster, Point
from .utils import logger

MAX_ALIGNED_FAN_OUT = 2

Positions = Dict[str, Point]


def member_center_x(cluster: Cluster, center: Point, index: int, config: LayoutConfig = DEFAULT_CONFIG) -> float:
    """Horizontal center of the ``index``-th member of a cluster centered on ``center``."""
    return center.x - cluster.width / 2 + index * config.member_stride + config.node_width / 2


def child_cluster_fan_out(graph: nx.DiGraph, cluster_id: str) -> int:
    """Number of distinct child clusters a cluster has in the rank graph."""
    if cluster_id not in graph:
        return 0
    return len(set(graph.successors(cluster_id)) - {cluster_id})


def _row(positions: Positions, ranks: Mapping[str, int], rank: int, exclude: str | None = None) -> List[str]:
    return [cid for cid in positions if cid != exclude and ranks.get(cid) == rank]


def push_apart(
    positions: Positions,
    clusters: ClusterIndex,
    ranks: Mapping[str, int],
    anchor_id: str,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> Tuple[Positions, int]:
    """Move same-rank clusters away from ``anchor_id`` until none is closer than ``min_gap``.

    Clusters right of the anchor are pushed right, the others left, each by
    exactly its overlap with the nearest cluster on the anchor's side. Runs at
    most ``max_collision_passes`` times and stops once a pass moves nothing.
    Returns the new positions and the number of pushes made.
    """

    result = dict(positions)
    anchor = result[anchor_id]
    anchor_half = clusters[anchor_id].width / 2
    order = {cid: idx for idx, cid in enumerate(result)}
    row = _row(result, ranks, ranks[anchor_id], exclude=anchor_id)
    pushes = 0
    for _ in range(config.max_collision_passes):
        moved = False
        right_side = sorted((c for c in row if result[c].x > anchor.x), key=lambda c: (result[c].x, order[c]))
        edge = anchor.x + anchor_half
        for cid in right_side:
            half = clusters[cid].width / 2
            overlap = edge + config.min_gap - (result[cid].x - half)
            if overlap > 0:
                result[cid] = result[cid].shifted(dx=overlap)
                moved = True
                pushes += 1
            edge = max(edge, result[cid].x + half)

        left_side = sorted((c for c in row if result[c].x <= anchor.x), key=lambda c: (-result[c].x, order[c]))
        edge = anchor.x - anchor_half
        for cid in left_side:
            half = clusters[cid].width / 2
            overlap = (result[cid].x + half) + config.min_gap - edge
            if overlap > 0:
                result[cid] = result[cid].shifted(dx=-overlap)
                moved = True
                pushes += 1
            edge = min(edge, result[cid].x - half)
        if not moved:
            break
    return result, pushes


def align_parents(
    positions: Positions,
    clusters: ClusterIndex,
    graph: nx.DiGraph,
    ranks: Mapping[str, int],
    visible: Collection[str],
    config: LayoutConfig = DEFAULT_CONFIG,
    rules: LayoutRules = DEFAULT_RULES,
) -> Tuple[Positions, int, int]:
    """Center low fan-out parent clusters above the member of a couple they belong to.

    Multi-member clusters are visited in cluster order, members left to right.
    A parent cluster moves only when it is ranked strictly above the couple
    and has at most two child clusters. Each move is followed by
    :func:`push_apart` on the parent's rank when overlap resolution is on.

    Returns new positions, the number of alignments and the number of pushes.
    """

    result = dict(positions)
    aligned = 0
    pushes = 0
    for cluster in clusters:
        if cluster.id not in result or len(cluster.members) < 2:
            continue
        for index, member in enumerate(cluster.members):
            for parent_id in member.parent_ids:
                if parent_id not in visible:
                    continue
                parent_cluster = clusters.person_cluster.get(parent_id)
                if parent_cluster is None or parent_cluster not in result:
                    continue
                if ranks.get(parent_cluster, 0) >= ranks.get(cluster.id, 0):
                    continue
                if child_cluster_fan_out(graph, parent_cluster) > MAX_ALIGNED_FAN_OUT:
                    continue
                target = member_center_x(cluster, result[cluster.id], index, config)
                result[parent_cluster] = result[parent_cluster].with_x(target)
                aligned += 1
                if rules.overlap_resolution:
                    result, pushed = push_apart(result, clusters, ranks, parent_cluster, config)
                    pushes += pushed
    logger.debug("Parent alignment: %d moves, %d pushes", aligned, pushes)
    return result, aligned, pushes


def resolve_overlaps(
    positions: Positions,
    clusters: ClusterIndex,
    ranks: Mapping[str, int],
    config: LayoutConfig = DEFAULT_CONFIG,
) -> Tuple[Positions, int]:
    """Sweep every rank left to right, pushing clusters right to restore ``min_gap``.

    Row order never changes. Returns new positions and the number of pushes.
    """

    result = dict(positions)
    order = {cid: idx for idx, cid in enumerate(result)}
    pushes = 0
    for rank in sorted(set(ranks[cid] for cid in result if cid in ranks)):
        row = _row(result, ranks, rank)
        for _ in range(config.max_collision_passes):
            moved = False
            edge = None
            for cid in sorted(row, key=lambda c: (result[c].x, order[c])):
                half = clusters[cid].width / 2
                if edge is not None:
                    overlap = edge + config.min_gap - (result[cid].x - half)
                    if overlap > 0:
                        result[cid] = result[cid].shifted(dx=overlap)
                        moved = True
                        pushes += 1
                edge = result[cid].x + half if edge is None else max(edge, result[cid].x + half)
            if not moved:
                break
    return result, pushes


__all__ = [
    "MAX_ALIGNED_FAN_OUT",
    "member_center_x",
    "child_cluster_fan_out",
    "push_apart",
    "align_parents",
    "resolve_overlaps",
]
