"""Placement order of the persons queued after the root."""

from typing import Iterable

from graph import UNREACHABLE, DegreeMap, RelationIndex
from models import RelationType

# Lower rank places first within one degree
CONNECTION_RANK = {
    RelationType.SPOUSE: 0,
    RelationType.PARENT: 1,
    RelationType.CHILD: 1,
    RelationType.SIBLING: 2,
    RelationType.OTHER: 3,
}
INDIRECT_RANK = 4


def connection_rank(index: RelationIndex, degrees: DegreeMap, person_id: str) -> int:
    """
    Best rank of a relation linking the person to someone one degree closer to the root.

    For degree 1 that is the direct relation to the root itself.
    """
    degree = degrees.degree(person_id)
    if degree == 0:
        return 0
    if degree == UNREACHABLE:
        return INDIRECT_RANK

    ranks = [
        CONNECTION_RANK[relation_type]
        for neighbor in index.neighbors(person_id)
        if degrees.degree(neighbor) == degree - 1
        for relation_type in index.relation_types(neighbor, person_id)
    ]
    return min(ranks, default=INDIRECT_RANK)


def priority_key(index: RelationIndex, degrees: DegreeMap, person_id: str) -> tuple[int, int, str]:
    return (degrees.degree(person_id), connection_rank(index, degrees, person_id), person_id)


def placement_order(
    person_ids: Iterable[str], index: RelationIndex, degrees: DegreeMap
) -> list[str]:
    """Sort persons by (degree, connection rank, id); computed once per run."""
    return sorted(person_ids, key=lambda pid: priority_key(index, degrees, pid))
