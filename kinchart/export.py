"""Layout export utilities."""

from __future__ import annotations

import json
import os
from typing import Dict, Iterable, Mapping

import networkx as nx

from .schemas import Person, Point
from .utils import console

RELATION_SPOUSE = "spouse"
RELATION_CHILD = "child"


def positions_to_json(positions: Mapping[str, Point]) -> Dict[str, Dict[str, float]]:
    return {person_id: point.dict() for person_id, point in positions.items()}


def build_layout_graph(people: Iterable[Person], positions: Mapping[str, Point]) -> nx.MultiDiGraph:
    """Graph of the laid-out people with coordinates, for GraphML consumers.

    Only positioned people become nodes. Spouse links appear once per pair,
    directed from the ordinally smaller ID; child links run parent -> child.
    """

    graph = nx.MultiDiGraph()
    people = [person for person in people if person.id in positions]
    for person in people:
        point = positions[person.id]
        attrs = {"x": float(point.x), "y": float(point.y), "gender": person.gender}
        if person.birth_date:
            attrs["birth_date"] = person.birth_date
        if person.birth_order is not None:
            attrs["birth_order"] = person.birth_order
        graph.add_node(person.id, **attrs)

    seen_spouses = set()
    for person in people:
        for spouse_id in person.spouse_ids:
            pair = tuple(sorted((person.id, spouse_id)))
            if spouse_id not in positions or pair in seen_spouses:
                continue
            seen_spouses.add(pair)
            graph.add_edge(pair[0], pair[1], relation=RELATION_SPOUSE)
        for child_id in person.child_ids:
            if child_id in positions and not graph.has_edge(person.id, child_id):
                graph.add_edge(person.id, child_id, relation=RELATION_CHILD)
    return graph


def export_layout(people: Iterable[Person], positions: Mapping[str, Point], out_dir: str) -> Dict[str, str]:
    """Write ``positions.json`` and ``layout.graphml`` into ``out_dir``."""

    os.makedirs(out_dir, exist_ok=True)
    positions_path = os.path.join(out_dir, "positions.json")
    graphml_path = os.path.join(out_dir, "layout.graphml")
    with open(positions_path, "w", encoding="utf-8") as fh:
        json.dump(positions_to_json(positions), fh, indent=2)
    graph = build_layout_graph(people, positions)
    nx.write_graphml(graph, graphml_path)
    console.log(f"Wrote {len(positions)} positions to {out_dir}")
    return {"positions": positions_path, "graphml": graphml_path}


__all__ = ["positions_to_json", "build_layout_graph", "export_layout"]
