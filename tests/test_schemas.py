import pytest

from kinchart.schemas import (
    PARENT_CHILD,
    SPOUSE,
    Point,
    load_document,
    load_people,
    person_from_dict,
    relationship_from_dict,
)


def test_person_from_camel_case_document():
    person = person_from_dict(
        {
            "personId": "p1",
            "gender": "Male",
            "birthDate": "1950-04-01",
            "birthOrder": "2",
            "relationships": {"parentIds": ["a", "b"], "childIds": [], "spouseIds": ["s"]},
        }
    )
    assert person.id == "p1"
    assert person.is_male
    assert person.birth_date == "1950-04-01"
    assert person.birth_order == 2
    assert person.parent_ids == ["a", "b"]
    assert person.spouse_ids == ["s"]


def test_person_from_flat_snake_case():
    person = person_from_dict({"id": 7, "child_ids": ["c"]})
    assert person.id == "7"
    assert person.gender == "unknown"
    assert person.child_ids == ["c"]
    assert person.birth_order is None


def test_person_without_id_is_rejected():
    with pytest.raises(ValueError):
        person_from_dict({"gender": "female"})


def test_id_lists_must_be_lists():
    with pytest.raises(ValueError):
        person_from_dict({"id": "x", "parentIds": "y"})


def test_relationship_reads_nested_marriage_order():
    rel = relationship_from_dict(
        {"type": "spouse", "person1Id": "h", "person2Id": "w", "marriage": {"marriageOrder": 2}}
    )
    assert rel.type == SPOUSE
    assert rel.marriage_order == 2
    assert rel.involves("w", "h")


def test_relationship_type_is_validated():
    with pytest.raises(ValueError):
        relationship_from_dict({"type": "cousin", "person1Id": "a", "person2Id": "b"})


def test_load_document_splits_sections():
    people, relationships = load_document(
        {
            "persons": [{"id": "a"}, {"id": "b"}],
            "relationships": [{"type": "parent-child", "person1_id": "a", "person2_id": "b"}],
        }
    )
    assert [p.id for p in people] == ["a", "b"]
    assert relationships[0].type == PARENT_CHILD
    assert relationships[0].marriage_order is None


def test_load_people_accepts_bare_list():
    assert [p.id for p in load_people([{"id": "a"}])] == ["a"]
    with pytest.raises(ValueError):
        load_people({"persons": {"id": "a"}})


def test_point_is_immutable():
    point = Point(1.0, 2.0)
    assert point.shifted(dx=3) == Point(4.0, 2.0)
    assert point.with_x(0) == Point(0, 2.0)
    with pytest.raises(AttributeError):
        point.x = 5
