import pytest

from kinchart.clusters import ClusterIndex
from kinchart.expand import expand_clusters, normalize, orphan_row_y, place_orphans
from kinchart.schemas import Cluster, Person, Point


def couple_index():
    index = ClusterIndex()
    index.add(Cluster(id="c", members=[Person("h", "male"), Person("w", "female")], width=465.0, height=130.0))
    index.add(Cluster(id="o", members=[Person("x")], width=220.0, height=130.0))
    return index


def test_expand_clusters_places_members_left_to_right():
    people = expand_clusters({"c": Point(500, 200)}, couple_index())

    assert people == {"h": Point(267.5, 135), "w": Point(512.5, 135)}


def test_orphans_share_one_row_below_the_tree():
    index = couple_index()
    top = orphan_row_y({"c": Point(500, 200)}, index)
    extra = Cluster(id="o2", members=[Person("y"), Person("z")], width=465.0, height=130.0)

    placed = place_orphans([index["o"], extra], top)

    assert top == pytest.approx(265 + 300)
    assert placed["x"] == Point(50, top)
    assert placed["y"] == Point(50 + 220 + 80, top)
    assert placed["z"] == Point(50 + 220 + 80 + 245, top)


def test_orphan_row_without_ranked_clusters():
    assert orphan_row_y({}, couple_index()) == pytest.approx(300)


def test_normalize_moves_minimum_to_margin():
    result = normalize({"a": Point(-100, 20), "b": Point(40, -5)})

    assert result == {"a": Point(50, 75), "b": Point(190, 50)}
    assert normalize({}) == {}
