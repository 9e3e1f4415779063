from kinchart.clusters import build_clusters, index_marriage_orders, marriage_order, order_members
from kinchart.config import LayoutRules
from kinchart.schemas import Person, Relationship


def marry(a, b):
    a.spouse_ids.append(b.id)
    b.spouse_ids.append(a.id)


def spouse_rel(a, b, order=None):
    return Relationship(type="spouse", person1_id=a.id, person2_id=b.id, marriage_order=order)


def test_two_wives_flank_the_husband_by_marriage_order():
    husband = Person("h", "male")
    first = Person("w-b", "female")
    second = Person("w-a", "female")
    marry(husband, first)
    marry(husband, second)
    rels = [spouse_rel(husband, second, 2), spouse_rel(first, husband, 1)]

    index = build_clusters([husband, first, second], rels)

    (cluster,) = list(index)
    assert cluster.member_ids == ["w-b", "h", "w-a"]


def test_missing_marriage_order_counts_as_first():
    husband = Person("h", "male")
    later = Person("a", "female")
    unnumbered = Person("b", "female")
    orders = index_marriage_orders([spouse_rel(husband, later, 2)])

    assert marriage_order(orders, "h", "b") == 1
    ordered = order_members([husband, later, unnumbered], orders)
    assert [m.id for m in ordered] == ["b", "h", "a"]


def test_couple_puts_man_first():
    wife = Person("a", "female")
    husband = Person("z", "male")

    assert [m.id for m in order_members([wife, husband], {})] == ["z", "a"]


def test_three_wives_follow_the_husband_in_marriage_order():
    husband = Person("h", "male")
    wives = [Person(f"w{i}", "female") for i in range(3)]
    rels = [spouse_rel(husband, wives[0], 3), spouse_rel(husband, wives[1], 1), spouse_rel(husband, wives[2], 2)]

    ordered = order_members([husband, *wives], index_marriage_orders(rels))

    assert [m.id for m in ordered] == ["h", "w1", "w2", "w0"]


def test_clusters_partition_visible_people():
    a = Person("a", "male")
    b = Person("b", "female")
    c = Person("c", "male")
    single = Person("d")
    marry(a, b)
    marry(b, c)
    people = [a, b, c, single]

    index = build_clusters(people)

    members = [pid for cluster in index for pid in cluster.member_ids]
    assert sorted(members) == ["a", "b", "c", "d"]
    assert len(members) == len(set(members))
    assert index.person_cluster["c"] == index.person_cluster["a"]
    assert len(index) == 2


def test_invisible_spouse_is_left_out():
    a = Person("a", "male")
    hidden = Person("b", "female")
    marry(a, hidden)

    index = build_clusters([a])

    assert [c.member_ids for c in index] == [["a"]]
    assert index.cluster_of("b") is None


def test_seeds_use_ordinal_id_order_and_width():
    upper = Person("B", "male")
    lower = Person("a", "female")
    marry(upper, lower)

    index = build_clusters([lower, upper])

    (cluster,) = list(index)
    assert cluster.id == "cluster-B"
    assert cluster.width == 2 * 220 + 25
    assert cluster.height == 130


def test_spouse_ordering_can_be_disabled():
    wife = Person("a", "female")
    husband = Person("z", "male")
    marry(wife, husband)

    index = build_clusters([wife, husband], rules=LayoutRules(spouse_ordering=False))

    assert [c.member_ids for c in index] == [["a", "z"]]
