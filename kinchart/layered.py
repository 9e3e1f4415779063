"""Layered (Sugiyama-style) drawing of the cluster rank graph.

Four steps, each a plain function so they can be tested on their own:

1. :func:`assign_ranks` gives every cluster its longest-path distance from a
   source, which fixes its generation row.
2. :func:`insert_virtual_nodes` splits edges that skip rows into chains of
   zero-width virtual nodes, so every edge joins adjacent rows.
3. :func:`order_ranks` seeds each row with a depth-first visit order and then
   runs alternating barycenter sweeps, keeping the ordering with the fewest
   crossings.
4. :func:`assign_coordinates` packs each row left to right with the required
   separation and then pulls clusters toward their neighbours' barycenters
   without ever breaking the row order or the separation.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence, Tuple

import networkx as nx

from .config import DEFAULT_CONFIG, LayoutConfig
from .schemas import Point
from .utils import logger

VIRTUAL_PREFIX = "__virtual__"

Layers = Dict[int, List[str]]


@dataclass
class LayeredLayout:
    """Cluster centers plus the rank and row order they were derived from."""

    positions: Dict[str, Point] = field(default_factory=dict)
    ranks: Dict[str, int] = field(default_factory=dict)
    layers: Layers = field(default_factory=dict)
    crossings: int = 0

    @property
    def max_rank(self) -> int:
        return max(self.ranks.values(), default=-1)


def assign_ranks(dag: nx.DiGraph) -> Dict[str, int]:
    """Top-down longest-path ranking; sources sit on rank 0."""
    ranks: Dict[str, int] = {}
    for node in nx.topological_sort(dag):
        ranks[node] = max(
            (ranks[pred] + dag.edges[pred, node].get("minlen", 1) for pred in dag.predecessors(node)),
            default=0,
        )
    return ranks


def is_virtual(node: str) -> bool:
    return node.startswith(VIRTUAL_PREFIX)


def insert_virtual_nodes(dag: nx.DiGraph, ranks: Mapping[str, int]) -> Tuple[nx.DiGraph, Dict[str, int]]:
    """Copy ``dag`` with long edges replaced by chains through virtual nodes."""

    layered = nx.DiGraph()
    layered.add_nodes_from(dag.nodes(data=True))
    all_ranks = dict(ranks)
    for u, v, data in dag.edges(data=True):
        span = all_ranks[v] - all_ranks[u]
        if span <= 1:
            layered.add_edge(u, v, **data)
            continue
        prev = u
        for step in range(1, span):
            virtual = f"{VIRTUAL_PREFIX}{u}->{v}#{step}"
            layered.add_node(virtual, width=0.0, height=0.0)
            all_ranks[virtual] = all_ranks[u] + step
            layered.add_edge(prev, virtual, **data)
            prev = virtual
        layered.add_edge(prev, v, **data)
    return layered, all_ranks


def initial_order(graph: nx.DiGraph, ranks: Mapping[str, int]) -> Layers:
    """Depth-first visit order, started from nodes sorted by rank then insertion."""

    insertion = {node: idx for idx, node in enumerate(graph.nodes)}
    layers: Layers = defaultdict(list)
    visited = set()
    for start in sorted(graph.nodes, key=lambda n: (ranks[n], insertion[n])):
        stack = [start]
        while stack:
            node = stack.pop()
            if node in visited:
                continue
            visited.add(node)
            layers[ranks[node]].append(node)
            stack.extend(reversed(list(graph.successors(node))))
    return {rank: layers[rank] for rank in sorted(layers)}


def count_crossings(graph: nx.DiGraph, layers: Layers) -> int:
    """Count edge crossings between every pair of adjacent rows."""

    total = 0
    ranks = sorted(layers)
    for upper, lower in zip(ranks, ranks[1:]):
        upper_pos = {node: idx for idx, node in enumerate(layers[upper])}
        lower_pos = {node: idx for idx, node in enumerate(layers[lower])}
        edges = [
            (upper_pos[u], lower_pos[v])
            for u in layers[upper]
            for v in graph.successors(u)
            if v in lower_pos
        ]
        for i in range(len(edges)):
            u1, v1 = edges[i]
            for u2, v2 in edges[i + 1:]:
                if (u1 < u2 and v1 > v2) or (u1 > u2 and v1 < v2):
                    total += 1
    return total


def _barycenter_row(graph: nx.DiGraph, fixed: Sequence[str], free: Sequence[str], downward: bool) -> List[str]:
    fixed_pos = {node: idx for idx, node in enumerate(fixed)}
    keys = {}
    for idx, node in enumerate(free):
        if downward:
            links = [(n, graph.edges[n, node].get("weight", 1)) for n in graph.predecessors(node)]
        else:
            links = [(n, graph.edges[node, n].get("weight", 1)) for n in graph.successors(node)]
        links = [(fixed_pos[n], w) for n, w in links if n in fixed_pos]
        total_weight = sum(w for _, w in links)
        if total_weight:
            keys[node] = (sum(pos * w for pos, w in links) / total_weight, idx)
        else:
            keys[node] = (float(idx), idx)
    return sorted(free, key=lambda n: keys[n])


def order_ranks(graph: nx.DiGraph, ranks: Mapping[str, int], sweeps: int = DEFAULT_CONFIG.ordering_sweeps) -> Tuple[Layers, int]:
    """Reduce crossings with alternating down/up barycenter sweeps.

    Returns the best ordering seen and its crossing count.
    """

    layers = initial_order(graph, ranks)
    best = {rank: list(row) for rank, row in layers.items()}
    best_crossings = count_crossings(graph, best)
    row_ids = sorted(layers)
    for sweep in range(sweeps):
        if best_crossings == 0:
            break
        downward = sweep % 2 == 0
        sequence = row_ids[1:] if downward else list(reversed(row_ids[:-1]))
        for rank in sequence:
            neighbour = rank - 1 if downward else rank + 1
            layers[rank] = _barycenter_row(graph, layers[neighbour], layers[rank], downward)
        crossings = count_crossings(graph, layers)
        if crossings < best_crossings:
            best = {rank: list(row) for rank, row in layers.items()}
            best_crossings = crossings
    return best, best_crossings


def _width(graph: nx.DiGraph, node: str) -> float:
    return graph.nodes[node].get("width", 0.0)


def _separation(graph: nx.DiGraph, left: str, right: str, config: LayoutConfig) -> float:
    gap = config.node_sep if not (is_virtual(left) or is_virtual(right)) else config.node_sep / 2
    return (_width(graph, left) + _width(graph, right)) / 2 + gap


def _place_row(row: Sequence[str], desired: Mapping[str, float], gaps: Sequence[float]) -> Dict[str, float]:
    """Closest feasible placement to ``desired`` keeping row order and gaps.

    Averages a left-anchored and a right-anchored greedy pass; both satisfy
    ``x[i+1] - x[i] >= gaps[i]``, so their mean does too.
    """

    n = len(row)
    left = [0.0] * n
    right = [0.0] * n
    for i, node in enumerate(row):
        left[i] = desired[node] if i == 0 else max(desired[node], left[i - 1] + gaps[i - 1])
    for i in range(n - 1, -1, -1):
        node = row[i]
        right[i] = desired[node] if i == n - 1 else min(desired[node], right[i + 1] - gaps[i])
    return {node: (left[i] + right[i]) / 2 for i, node in enumerate(row)}


def assign_coordinates(
    graph: nx.DiGraph,
    layers: Layers,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> Dict[str, Point]:
    """Give each node a center point honouring widths and ``node_sep``."""

    gaps = {
        rank: [_separation(graph, a, b, config) for a, b in zip(row, row[1:])]
        for rank, row in layers.items()
    }
    xs: Dict[str, float] = {}
    for rank, row in layers.items():
        cursor = 0.0
        for node in row:
            width = _width(graph, node)
            xs[node] = cursor + width / 2
            cursor += width + config.node_sep

    row_ids = sorted(layers)
    for sweep in range(config.coordinate_sweeps * 2):
        downward = sweep % 2 == 0
        sequence = row_ids[1:] if downward else list(reversed(row_ids[:-1]))
        for rank in sequence:
            desired = {}
            for node in layers[rank]:
                if downward:
                    links = [(n, graph.edges[n, node].get("weight", 1)) for n in graph.predecessors(node)]
                else:
                    links = [(n, graph.edges[node, n].get("weight", 1)) for n in graph.successors(node)]
                total_weight = sum(w for _, w in links)
                if total_weight:
                    desired[node] = sum(xs[n] * w for n, w in links) / total_weight
                else:
                    desired[node] = xs[node]
            xs.update(_place_row(layers[rank], desired, gaps[rank]))

    real = [node for node in xs if not is_virtual(node)]
    if not real:
        return {}
    min_left = min(xs[node] - _width(graph, node) / 2 for node in real)
    dx = config.margin - min_left
    rank_of = {node: rank for rank, row in layers.items() for node in row}
    return {
        node: Point(
            xs[node] + dx,
            config.margin + rank_of[node] * config.rank_height + config.node_height / 2,
        )
        for node in real
    }


def solve_layout(dag: nx.DiGraph, config: LayoutConfig = DEFAULT_CONFIG) -> LayeredLayout:
    """Rank, order and place every cluster of an acyclic rank graph."""

    if dag.number_of_nodes() == 0:
        return LayeredLayout()
    ranks = assign_ranks(dag)
    layered, all_ranks = insert_virtual_nodes(dag, ranks)
    layers, crossings = order_ranks(layered, all_ranks, config.ordering_sweeps)
    points = assign_coordinates(layered, layers, config)
    real_layers = {
        rank: [node for node in row if not is_virtual(node)] for rank, row in layers.items()
    }
    logger.debug(
        "Layered layout: %d clusters on %d ranks, %d crossings",
        len(points),
        len(real_layers),
        crossings,
    )
    return LayeredLayout(positions=points, ranks=ranks, layers=real_layers, crossings=crossings)


__all__ = [
    "LayeredLayout",
    "assign_ranks",
    "insert_virtual_nodes",
    "initial_order",
    "count_crossings",
    "order_ranks",
    "assign_coordinates",
    "solve_layout",
]
