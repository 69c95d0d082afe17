"""Age ordering of siblings and children."""

from collections import Counter
from datetime import date
import math
from typing import Iterable, Mapping

from models import Person, age_hint


def age_key(
    person: Person, x: float | None = None, hint: int = 0
) -> tuple[int, date, int, float, str]:
    """
    Sort key placing the oldest person first.

    Equal birth dates fall back to the label hint (-1 older, 1 younger), then
    the current x (unplaced persons last) and then the id. Undated persons come
    after every dated one, ordered the same way.
    """
    dated = person.birth_date is not None
    return (
        0 if dated else 1,
        person.birth_date if dated else date.min,
        hint,
        math.inf if x is None else x,
        person.id,
    )


def age_hints(person_ids: Iterable[str], people: Mapping[str, Person]) -> dict[str, int]:
    """
    Older/younger hints from the labels group members give each other.

    "Older Brother" on a relation makes its target older, "Little Sister"
    younger. Conflicting labels cancel out.
    """
    group = set(person_ids)
    votes: Counter = Counter()
    for person_id in sorted(group):
        for relation in people[person_id].relations:
            target_id = relation.target.id
            if target_id in group and target_id != person_id:
                votes[target_id] += age_hint(relation.label)
    return {pid: (n > 0) - (n < 0) for pid, n in votes.items()}


def age_ordered(
    person_ids: Iterable[str], people: Mapping[str, Person], x_of: Mapping[str, float]
) -> list[str]:
    """Return `person_ids` sorted oldest to youngest."""
    person_ids = list(person_ids)
    hints = age_hints(person_ids, people)
    return sorted(
        person_ids,
        key=lambda pid: age_key(people[pid], x_of.get(pid), hints.get(pid, 0)),
    )
