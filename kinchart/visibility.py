"""Decide which people are shown when some branches are collapsed."""

from __future__ import annotations

from collections import deque
from typing import Collection, Deque, Dict, Iterable, List, Mapping, Set

from .schemas import Person


def index_people(people: Iterable[Person]) -> Dict[str, Person]:
    """Map person id -> person; later duplicates of an id are ignored."""
    index: Dict[str, Person] = {}
    for person in people:
        index.setdefault(person.id, person)
    return index


def find_roots(people: Iterable[Person], people_by_id: Mapping[str, Person]) -> List[Person]:
    """People with no parent present in the input, in input order."""
    return [
        person
        for person in people
        if not any(parent_id in people_by_id for parent_id in person.parent_ids)
    ]


def resolve_visible(people: List[Person], collapsed_ids: Collection[str] = ()) -> Set[str]:
    """Breadth-first walk from the roots.

    Spouses are always followed. Children are followed only from people that
    are not collapsed, so a person reachable solely through a collapsed
    ancestor stays hidden. Every person is expanded at most once, which keeps
    the walk finite on cyclic input.
    """

    people_by_id = index_people(people)
    visible: Set[str] = set()
    queue: Deque[Person] = deque(find_roots(people, people_by_id))
    while queue:
        person = queue.popleft()
        if person.id in visible:
            continue
        visible.add(person.id)
        for spouse_id in person.spouse_ids:
            spouse = people_by_id.get(spouse_id)
            if spouse is not None and spouse_id not in visible:
                queue.append(spouse)
        if person.id in collapsed_ids:
            continue
        for child_id in person.child_ids:
            child = people_by_id.get(child_id)
            if child is not None and child_id not in visible:
                queue.append(child)
    return visible


def count_dangling_references(people: Iterable[Person]) -> int:
    """Number of relationship IDs that point at nobody in ``people``."""
    people = list(people)
    known = {person.id for person in people}
    return sum(
        1
        for person in people
        for ref in (*person.parent_ids, *person.child_ids, *person.spouse_ids)
        if ref not in known
    )


__all__ = ["index_people", "find_roots", "resolve_visible", "count_dangling_references"]
