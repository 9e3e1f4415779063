import json

import networkx as nx

from kinchart.export import build_layout_graph, export_layout, positions_to_json
from kinchart.schemas import Person, Point


def _family():
    dad = Person("dad", "male", spouse_ids=["mom"], child_ids=["kid"])
    mom = Person("mom", "female", spouse_ids=["dad"], child_ids=["kid"])
    kid = Person("kid", birth_order=1, parent_ids=["dad", "mom"])
    positions = {"dad": Point(50, 50), "mom": Point(295, 50), "kid": Point(172.5, 340)}
    return [dad, mom, kid], positions


def test_positions_to_json():
    _, positions = _family()
    assert positions_to_json(positions)["kid"] == {"x": 172.5, "y": 340}


def test_build_layout_graph_edges():
    people, positions = _family()
    graph = build_layout_graph(people, positions)
    relations = sorted((u, v, d["relation"]) for u, v, d in graph.edges(data=True))
    assert relations == [
        ("dad", "kid", "child"),
        ("dad", "mom", "spouse"),
        ("mom", "kid", "child"),
    ]
    assert graph.nodes["kid"]["birth_order"] == 1


def test_unpositioned_people_are_skipped():
    people, positions = _family()
    del positions["kid"]
    graph = build_layout_graph(people, positions)
    assert set(graph.nodes) == {"dad", "mom"}
    assert graph.number_of_edges() == 1


def test_export_layout_writes_files(tmp_path):
    people, positions = _family()
    paths = export_layout(people, positions, str(tmp_path / "out"))

    with open(paths["positions"], encoding="utf-8") as fh:
        assert json.load(fh)["mom"] == {"x": 295, "y": 50}
    graph = nx.read_graphml(paths["graphml"])
    assert float(graph.nodes["dad"]["x"]) == 50.0
    assert graph.number_of_nodes() == 3
