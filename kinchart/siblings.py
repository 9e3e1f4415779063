"""Reorder sibling clusters eldest-first inside the slots they already occupy."""

from __future__ import annotations

from collections import defaultdict
from typing import Collection, Dict, Iterator, List, Mapping, Tuple

from .clusters import ClusterIndex
from .graph import birth_sort_key
from .schemas import Person, Point

Positions = Dict[str, Point]
SiblingGroup = List[Tuple[str, Person]]


def sibling_groups(
    clusters: ClusterIndex,
    positions: Positions,
    visible: Collection[str],
    people_by_id: Mapping[str, Person],
) -> Iterator[Tuple[str, SiblingGroup]]:
    """Yield ``(parent_cluster_id, [(child_cluster_id, representative), ...])``.

    Child clusters are listed in discovery order (parent members left to
    right, each member's children in stored order). The representative is the
    first child found in that cluster. Parents with fewer than two child
    clusters are skipped.
    """

    for parent in clusters:
        if parent.id not in positions:
            continue
        found: Dict[str, Person] = {}
        for member in parent.members:
            for child_id in member.child_ids:
                if child_id not in visible or child_id not in people_by_id:
                    continue
                child_cluster = clusters.person_cluster.get(child_id)
                if child_cluster is None or child_cluster == parent.id or child_cluster not in positions:
                    continue
                found.setdefault(child_cluster, people_by_id[child_id])
        if len(found) >= 2:
            yield parent.id, list(found.items())


def sort_siblings(
    positions: Positions,
    clusters: ClusterIndex,
    ranks: Mapping[str, int],
    visible: Collection[str],
    people_by_id: Mapping[str, Person],
) -> Tuple[Positions, int]:
    """Permute sibling x-positions so birth order reads left to right.

    The occupied x values of each sibling set (per rank) are kept; only which
    cluster sits in which slot changes. Returns new positions and the number
    of sibling sets whose order changed.
    """

    result = dict(positions)
    reordered = 0
    for _, group in sibling_groups(clusters, result, visible, people_by_id):
        by_rank: Dict[int, SiblingGroup] = defaultdict(list)
        for cluster_id, representative in group:
            by_rank[ranks.get(cluster_id, 0)].append((cluster_id, representative))
        for siblings in by_rank.values():
            if len(siblings) < 2:
                continue
            slots = sorted(result[cluster_id].x for cluster_id, _ in siblings)
            eldest_first = [cid for cid, _ in sorted(siblings, key=lambda item: birth_sort_key(item[1]))]
            before = [cid for cid, _ in sorted(siblings, key=lambda item: result[item[0]].x)]
            for cluster_id, x in zip(eldest_first, slots):
                result[cluster_id] = result[cluster_id].with_x(x)
            if before != eldest_first:
                reordered += 1
    return result, reordered


__all__ = ["sibling_groups", "sort_siblings"]
