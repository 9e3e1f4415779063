import networkx as nx

from kinchart.clusters import build_clusters
from kinchart.graph import LINEAGE_WEIGHT, break_cycles, build_rank_graph, sort_by_birth
from kinchart.schemas import Person
from kinchart.visibility import index_people


def marry(a, b):
    a.spouse_ids.append(b.id)
    b.spouse_ids.append(a.id)


def parent_of(parent, *children):
    for child in children:
        parent.child_ids.append(child.id)
        child.parent_ids.append(parent.id)


def test_sort_by_birth_prefers_dates_then_order_then_input_order():
    a = Person("A", birth_order=2)
    b = Person("B", birth_date="2001-05-01")
    c = Person("C")
    d = Person("D")
    early = Person("E", birth_date="1999-01-01", birth_order=3)
    same_day_first = Person("F", birth_date="1999-01-01", birth_order=1)

    ordered = sort_by_birth([c, a, d, b, early, same_day_first])

    assert [p.id for p in ordered] == ["F", "E", "B", "A", "C", "D"]


def test_rank_graph_links_parent_cluster_to_child_clusters():
    father = Person("F", "male")
    mother = Person("M", "female")
    younger = Person("Y", birth_date="2012-01-01")
    elder = Person("X", birth_date="2010-01-01")
    loner = Person("L")
    marry(father, mother)
    parent_of(father, younger, elder)
    parent_of(mother, younger, elder)
    people = [father, mother, younger, elder, loner]
    visible = {p.id for p in people}

    clusters = build_clusters(people)
    graph = build_rank_graph(people, clusters, visible, index_people(people))

    assert "cluster-L" not in graph
    assert list(graph.successors("cluster-F")) == ["cluster-X", "cluster-Y"]
    assert graph.number_of_edges() == 2
    assert graph.edges["cluster-F", "cluster-X"]["weight"] == LINEAGE_WEIGHT
    assert graph.nodes["cluster-F"]["width"] == 465


def test_hidden_children_do_not_create_edges():
    parent = Person("P")
    child = Person("C")
    parent_of(parent, child)
    people = [parent, child]

    clusters = build_clusters([parent])
    graph = build_rank_graph([parent], clusters, {"P"}, index_people(people))

    assert graph.number_of_nodes() == 0


def test_break_cycles_drops_closing_edge_and_keeps_input():
    graph = nx.DiGraph()
    graph.add_edge("a", "b")
    graph.add_edge("b", "c")
    graph.add_edge("c", "a")

    dag, removed = break_cycles(graph)

    assert removed == [("c", "a")]
    assert nx.is_directed_acyclic_graph(dag)
    assert graph.has_edge("c", "a")


def test_break_cycles_leaves_dag_alone():
    graph = nx.DiGraph([("a", "b"), ("a", "c")])

    dag, removed = break_cycles(graph)

    assert removed == []
    assert set(dag.edges) == {("a", "b"), ("a", "c")}
