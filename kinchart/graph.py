"""Rank graph construction: clusters as nodes, parent -> child cluster edges."""

from __future__ import annotations

from typing import Collection, Iterable, List, Mapping, Optional, Tuple

import networkx as nx

from .clusters import ClusterIndex
from .schemas import Cluster, Person
from .utils import logger

LINEAGE_WEIGHT = 100
MIN_RANK_SPAN = 1


def birth_sort_key(person: Person) -> Tuple[int, str, int, int]:
    """Dated people first by date, then by birth order; people with neither sort last.

    Use with a stable sort so people lacking birth data keep their input order.
    """

    has_date = 0 if person.birth_date else 1
    has_order = 0 if person.birth_order is not None else 1
    return (has_date, person.birth_date or "", has_order, person.birth_order or 0)


def sort_by_birth(people: Iterable[Person]) -> List[Person]:
    return sorted(people, key=birth_sort_key)


def has_family_links(cluster: Cluster, visible: Collection[str]) -> bool:
    return any(
        any(pid in visible for pid in member.parent_ids) or any(cid in visible for cid in member.child_ids)
        for member in cluster.members
    )


def build_rank_graph(
    visible_people: Iterable[Person],
    clusters: ClusterIndex,
    visible: Collection[str],
    people_by_id: Mapping[str, Person],
) -> nx.DiGraph:
    """Build the cluster DAG handed to the layered solver.

    Only clusters with a visible parent or child become nodes; the rest are
    orphans. Node attributes carry the pixel footprint, edge attributes the
    lineage weight and minimum rank span.
    """

    graph = nx.DiGraph()
    for cluster in clusters:
        if has_family_links(cluster, visible):
            graph.add_node(cluster.id, width=cluster.width, height=cluster.height)

    for person in visible_people:
        source = clusters.person_cluster.get(person.id)
        if source is None or source not in graph:
            continue
        children = [
            people_by_id[child_id]
            for child_id in person.child_ids
            if child_id in visible and child_id in people_by_id
        ]
        for child in sort_by_birth(children):
            target = clusters.person_cluster.get(child.id)
            if target is None or target not in graph or target == source:
                continue
            if not graph.has_edge(source, target):
                graph.add_edge(source, target, weight=LINEAGE_WEIGHT, minlen=MIN_RANK_SPAN)
    return graph


def break_cycles(graph: nx.DiGraph) -> Tuple[nx.DiGraph, List[Tuple[str, str]]]:
    """Return an acyclic copy of ``graph`` and the edges dropped to get there.

    Each cycle found loses the edge that closes it. The search order follows
    node insertion order, so the same input always drops the same edges.
    """

    dag = graph.copy()
    removed: List[Tuple[str, str]] = []
    while True:
        cycle = _first_cycle(dag)
        if cycle is None:
            break
        u, v = cycle[-1][0], cycle[-1][1]
        dag.remove_edge(u, v)
        removed.append((u, v))
        logger.warning("Relationship cycle detected; ignoring lineage edge %s -> %s", u, v)
    return dag, removed


def _first_cycle(graph: nx.DiGraph) -> Optional[list]:
    try:
        return nx.find_cycle(graph, orientation="original")
    except nx.NetworkXNoCycle:
        return None


__all__ = [
    "LINEAGE_WEIGHT",
    "birth_sort_key",
    "sort_by_birth",
    "has_family_links",
    "build_rank_graph",
    "break_cycles",
]
