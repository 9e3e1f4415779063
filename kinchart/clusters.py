"""Group married people into clusters with a fixed left-to-right order."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional

from .config import DEFAULT_CONFIG, DEFAULT_RULES, LayoutConfig, LayoutRules
from .schemas import SPOUSE, Cluster, Person, Relationship
from .utils import ordinal_key
from .visibility import index_people

MarriageOrders = Mapping[FrozenSet[str], int]
DEFAULT_MARRIAGE_ORDER = 1


def index_marriage_orders(relationships: Iterable[Relationship]) -> Dict[FrozenSet[str], int]:
    """Spouse pair -> marriage order; the first relationship recorded for a pair wins."""
    orders: Dict[FrozenSet[str], int] = {}
    for rel in relationships:
        if rel.type != SPOUSE or rel.marriage_order is None:
            continue
        orders.setdefault(frozenset((rel.person1_id, rel.person2_id)), rel.marriage_order)
    return orders


def marriage_order(orders: MarriageOrders, spouse_id: str, partner_id: str) -> int:
    return orders.get(frozenset((spouse_id, partner_id)), DEFAULT_MARRIAGE_ORDER)


def order_members(members: List[Person], orders: MarriageOrders) -> List[Person]:
    """Return ``members`` in display order.

    One husband with exactly two wives is drawn between them: first wife on
    the left, second on the right. Any other cluster puts men first, then the
    remaining members by marriage order to the first man, with IDs breaking
    ties.
    """

    males = sorted((m for m in members if m.is_male), key=lambda m: ordinal_key(m.id))
    females = [m for m in members if m.gender == "female"]
    if len(members) == 3 and len(males) == 1 and len(females) == 2:
        husband = males[0]
        first, second = sorted(
            females,
            key=lambda w: (marriage_order(orders, husband.id, w.id), ordinal_key(w.id)),
        )
        return [first, husband, second]

    anchor = males[0] if males else None

    def sort_key(member: Person):
        if member.is_male:
            return (0, 0, ordinal_key(member.id))
        order = marriage_order(orders, anchor.id, member.id) if anchor else DEFAULT_MARRIAGE_ORDER
        return (1, order, ordinal_key(member.id))

    return sorted(members, key=sort_key)


@dataclass
class ClusterIndex:
    """Clusters in creation order plus a person -> cluster lookup."""

    clusters: Dict[str, Cluster] = field(default_factory=dict)
    person_cluster: Dict[str, str] = field(default_factory=dict)

    def __iter__(self) -> Iterator[Cluster]:
        return iter(self.clusters.values())

    def __len__(self) -> int:
        return len(self.clusters)

    def __getitem__(self, cluster_id: str) -> Cluster:
        return self.clusters[cluster_id]

    def cluster_of(self, person_id: str) -> Optional[Cluster]:
        cluster_id = self.person_cluster.get(person_id)
        return self.clusters.get(cluster_id) if cluster_id else None

    def add(self, cluster: Cluster) -> None:
        self.clusters[cluster.id] = cluster
        for member in cluster.members:
            self.person_cluster[member.id] = cluster.id


def build_clusters(
    visible_people: Iterable[Person],
    relationships: Iterable[Relationship] = (),
    config: LayoutConfig = DEFAULT_CONFIG,
    rules: LayoutRules = DEFAULT_RULES,
) -> ClusterIndex:
    """Partition visible people into spouse clusters.

    People are seeded in ordinal ID order; each seed collects every visible,
    still unclustered person reachable over spouse links.
    """

    people_by_id = index_people(visible_people)
    orders = index_marriage_orders(relationships)
    index = ClusterIndex()
    for person in sorted(people_by_id.values(), key=lambda p: ordinal_key(p.id)):
        if person.id in index.person_cluster:
            continue
        cluster_id = f"cluster-{person.id}"
        members = [person]
        claimed = {person.id}
        queue = deque(person.spouse_ids)
        while queue:
            spouse_id = queue.popleft()
            if spouse_id in claimed or spouse_id in index.person_cluster:
                continue
            spouse = people_by_id.get(spouse_id)
            if spouse is None:
                continue
            members.append(spouse)
            claimed.add(spouse_id)
            queue.extend(spouse.spouse_ids)
        if rules.spouse_ordering:
            members = order_members(members, orders)
        index.add(
            Cluster(
                id=cluster_id,
                members=members,
                width=config.cluster_width(len(members)),
                height=config.node_height,
            )
        )
    return index


__all__ = [
    "ClusterIndex",
    "index_marriage_orders",
    "marriage_order",
    "order_members",
    "build_clusters",
]
