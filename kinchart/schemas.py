"""Dataclasses for people, relationships and derived layout records."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

SPOUSE = "spouse"
PARENT_CHILD = "parent-child"
RELATIONSHIP_TYPES = {SPOUSE, PARENT_CHILD}


@dataclass
class Person:
    id: str
    gender: str = "unknown"
    birth_date: Optional[str] = None
    birth_order: Optional[int] = None
    parent_ids: List[str] = field(default_factory=list)
    child_ids: List[str] = field(default_factory=list)
    spouse_ids: List[str] = field(default_factory=list)

    @property
    def is_male(self) -> bool:
        return self.gender == "male"

    def dict(self) -> Dict[str, Any]:  # pragma: no cover - convenience
        return asdict(self)


@dataclass
class Relationship:
    type: str
    person1_id: str
    person2_id: str
    marriage_order: Optional[int] = None

    def involves(self, a: str, b: str) -> bool:
        return {self.person1_id, self.person2_id} == {a, b}

    def dict(self) -> Dict[str, Any]:  # pragma: no cover - convenience
        return asdict(self)


@dataclass
class Cluster:
    """A conjugal unit laid out as one horizontal block."""

    id: str
    members: List[Person]
    width: float
    height: float

    @property
    def member_ids(self) -> List[str]:
        return [member.id for member in self.members]

    def index_of(self, person_id: str) -> int:
        return self.member_ids.index(person_id)


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def shifted(self, dx: float = 0.0, dy: float = 0.0) -> "Point":
        return Point(self.x + dx, self.y + dy)

    def with_x(self, x: float) -> "Point":
        return Point(x, self.y)

    def dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


def _pick(mapping: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in mapping and mapping[key] is not None:
            return mapping[key]
    return None


def _id_list(value: Any, field_name: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise ValueError(f"{field_name} must be a list of IDs")
    return [str(item) for item in value]


def _optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{field_name} must be an integer, got {value!r}") from exc


def person_from_dict(data: Mapping[str, Any]) -> Person:
    """Build a :class:`Person` from either the camelCase document shape or flat snake_case keys.

    Relationship ID arrays may live in a nested ``relationships`` object (as in
    stored person documents) or at the top level.
    """

    if not isinstance(data, Mapping):
        raise ValueError("person entries must be objects")
    person_id = _pick(data, "personId", "id", "person_id")
    if person_id is None:
        raise ValueError(f"person entry without an id: {dict(data)!r}")
    rels = data.get("relationships")
    rels = rels if isinstance(rels, Mapping) else data
    birth_date = _pick(data, "birthDate", "birth_date")
    return Person(
        id=str(person_id),
        gender=str(_pick(data, "gender", "sex") or "unknown").lower(),
        birth_date=str(birth_date) if birth_date else None,
        birth_order=_optional_int(_pick(data, "birthOrder", "birth_order"), "birthOrder"),
        parent_ids=_id_list(_pick(rels, "parentIds", "parent_ids"), "parentIds"),
        child_ids=_id_list(_pick(rels, "childIds", "child_ids"), "childIds"),
        spouse_ids=_id_list(_pick(rels, "spouseIds", "spouse_ids"), "spouseIds"),
    )


def relationship_from_dict(data: Mapping[str, Any]) -> Relationship:
    if not isinstance(data, Mapping):
        raise ValueError("relationship entries must be objects")
    rel_type = _pick(data, "type", "relationship_type")
    if rel_type not in RELATIONSHIP_TYPES:
        raise ValueError(f"unknown relationship type {rel_type!r}")
    person1 = _pick(data, "person1Id", "person1_id")
    person2 = _pick(data, "person2Id", "person2_id")
    if person1 is None or person2 is None:
        raise ValueError(f"relationship without both endpoints: {dict(data)!r}")
    marriage = data.get("marriage")
    order = _pick(marriage, "marriageOrder", "marriage_order") if isinstance(marriage, Mapping) else None
    if order is None:
        order = _pick(data, "marriageOrder", "marriage_order")
    return Relationship(
        type=rel_type,
        person1_id=str(person1),
        person2_id=str(person2),
        marriage_order=_optional_int(order, "marriageOrder"),
    )


def _entries(document: Any, key: str) -> List[Any]:
    if isinstance(document, Mapping):
        document = document.get(key, [])
    if not isinstance(document, list):
        raise ValueError(f"expected a list of {key}")
    return document


def load_people(document: Any) -> List[Person]:
    """Parse a list of person objects (or ``{"persons": [...]}``)."""
    return [person_from_dict(entry) for entry in _entries(document, "persons")]


def load_relationships(document: Any) -> List[Relationship]:
    """Parse a list of relationship objects (or ``{"relationships": [...]}``)."""
    return [relationship_from_dict(entry) for entry in _entries(document, "relationships")]


def load_document(document: Any) -> Tuple[List[Person], List[Relationship]]:
    """Split a combined ``{"persons": [...], "relationships": [...]}`` document."""
    people = load_people(document)
    relationships: List[Relationship] = []
    if isinstance(document, Mapping) and "relationships" in document:
        relationships = load_relationships(document)
    return people, relationships


__all__ = [
    "Person",
    "Relationship",
    "Cluster",
    "Point",
    "SPOUSE",
    "PARENT_CHILD",
    "person_from_dict",
    "relationship_from_dict",
    "load_people",
    "load_relationships",
    "load_document",
]
