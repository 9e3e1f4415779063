"""Layout pipeline: visibility, clusters, ranking, alignment, sibling order, expansion."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Collection, Dict, Iterable, List, Optional, Tuple

from .align import align_parents, resolve_overlaps
from .clusters import build_clusters
from .config import DEFAULT_CONFIG, DEFAULT_RULES, LayoutConfig, LayoutRules
from .expand import expand_clusters, normalize, orphan_row_y, place_orphans
from .graph import break_cycles, build_rank_graph
from .layered import solve_layout
from .schemas import Person, Point, Relationship
from .siblings import sort_siblings
from .utils import console, logger
from .visibility import count_dangling_references, index_people, resolve_visible


@dataclass
class LayoutStats:
    """Diagnostics collected during a layout run."""

    people: int = 0
    visible: int = 0
    clusters: int = 0
    ranked_clusters: int = 0
    orphan_clusters: int = 0
    ranks: int = 0
    crossings: int = 0
    alignments: int = 0
    pushes: int = 0
    sibling_groups_reordered: int = 0
    dangling_references: int = 0
    cycles_broken: List[Tuple[str, str]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "people": self.people,
            "visible": self.visible,
            "clusters": self.clusters,
            "ranked_clusters": self.ranked_clusters,
            "orphan_clusters": self.orphan_clusters,
            "ranks": self.ranks,
            "crossings": self.crossings,
            "alignments": self.alignments,
            "pushes": self.pushes,
            "sibling_groups_reordered": self.sibling_groups_reordered,
            "dangling_references": self.dangling_references,
            "cycles_broken": [list(edge) for edge in self.cycles_broken],
        }

    def log(self) -> None:
        """Pretty-print a concise run summary to the console."""

        console.log(
            "Layout summary",
            {
                "people": self.people,
                "visible": self.visible,
                "clusters": self.clusters,
                "ranks": self.ranks,
                "orphans": self.orphan_clusters,
            },
        )
        if self.alignments or self.pushes:
            console.log(f"Parent alignments: {self.alignments} (pushes: {self.pushes})")
        if self.dangling_references:
            console.log(f"[yellow]Skipped {self.dangling_references} dangling references[/yellow]")
        for u, v in self.cycles_broken:
            console.log(f"[yellow]Cycle broken at {u} -> {v}[/yellow]")


@dataclass
class LayoutResult:
    """Return value for :func:`run_layout`. Holds positions + stats."""

    positions: Dict[str, Point]
    stats: LayoutStats


def run_layout(
    people: Iterable[Person],
    relationships: Iterable[Relationship] = (),
    collapsed_ids: Collection[str] = (),
    *,
    config: Optional[LayoutConfig] = None,
    rules: Optional[LayoutRules] = None,
) -> LayoutResult:
    """Compute a top-left coordinate for every laid-out person.

    Pure function of its inputs: nothing is cached between calls and no
    argument is modified.
    """

    config = config or DEFAULT_CONFIG
    rules = rules or DEFAULT_RULES
    people = list(people)
    stats = LayoutStats(people=len(people))
    if not people:
        return LayoutResult(positions={}, stats=stats)

    people_by_id = index_people(people)
    stats.dangling_references = count_dangling_references(people)
    if stats.dangling_references:
        logger.debug("Ignoring %d references to unknown people", stats.dangling_references)

    visible = resolve_visible(people, collapsed_ids)
    visible_people = [person for person in people_by_id.values() if person.id in visible]
    stats.visible = len(visible_people)

    clusters = build_clusters(visible_people, relationships, config, rules)
    stats.clusters = len(clusters)

    graph = build_rank_graph(visible_people, clusters, visible, people_by_id)
    dag, stats.cycles_broken = break_cycles(graph)
    layout = solve_layout(dag, config)
    stats.ranked_clusters = len(layout.positions)
    stats.ranks = layout.max_rank + 1
    stats.crossings = layout.crossings

    centers = layout.positions
    if rules.center_parent:
        centers, stats.alignments, stats.pushes = align_parents(
            centers, clusters, dag, layout.ranks, visible, config, rules
        )
    if rules.sort_by_birth_date:
        centers, stats.sibling_groups_reordered = sort_siblings(
            centers, clusters, layout.ranks, visible, people_by_id
        )
    if rules.overlap_resolution:
        centers, swept = resolve_overlaps(centers, clusters, layout.ranks, config)
        stats.pushes += swept

    positions = expand_clusters(centers, clusters, config)
    orphans = [cluster for cluster in clusters if cluster.id not in dag]
    stats.orphan_clusters = len(orphans)
    if rules.show_orphans and orphans:
        positions.update(place_orphans(orphans, orphan_row_y(centers, clusters, config), config))

    if rules.normalize_positions:
        positions = normalize(positions, config.margin)
    logger.debug("Laid out %d of %d people", len(positions), len(people))
    return LayoutResult(positions=positions, stats=stats)


def compute_layout(
    people: Iterable[Person],
    relationships: Iterable[Relationship] = (),
    collapsed_ids: Collection[str] = (),
    *,
    config: Optional[LayoutConfig] = None,
    rules: Optional[LayoutRules] = None,
) -> Dict[str, Point]:
    """Shortcut for ``run_layout(...).positions``."""
    return run_layout(people, relationships, collapsed_ids, config=config, rules=rules).positions


__all__ = ["LayoutStats", "LayoutResult", "run_layout", "compute_layout"]
