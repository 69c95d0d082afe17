"""NetworkX relation graph building, degree-of-separation traversal and caching."""

from collections import deque
from dataclasses import dataclass, field
import logging
import sys
from typing import Iterable

import networkx as nx

from errors import InfiniteLoop
from models import INVERSE_RELATION, Person, RelationType

logger = logging.getLogger(__name__)

# Degree assigned to persons with no path to the root
UNREACHABLE = sys.maxsize

# Generation step taken when following an edge of each type
GENERATION_STEP = {
    RelationType.PARENT: 1,
    RelationType.CHILD: -1,
    RelationType.SPOUSE: 0,
    RelationType.SIBLING: 0,
    RelationType.OTHER: 0,
}


class RelationIndex:
    """
    Symmetric, typed view of the relations between a set of persons.

    Backed by a MultiDiGraph whose edge keys are RelationType values. An edge
    u -> v with key "parent" reads "v is a parent of u". Every declared
    relation is indexed forward and mirrored with the complementary type, so a
    child that never declares its parent still sees that parent.
    """

    def __init__(self, graph: nx.MultiDiGraph, people: dict[str, Person]):
        self.graph = graph
        self.people = people

    def __contains__(self, person_id: str) -> bool:
        return person_id in self.people

    def related(self, person_id: str, relation_type: RelationType) -> list[str]:
        """Ids related to `person_id` by `relation_type`, sorted."""
        if person_id not in self.graph:
            return []
        return sorted(
            v
            for _, v, key in self.graph.out_edges(person_id, keys=True)
            if key == relation_type.value
        )

    def parents(self, person_id: str) -> list[str]:
        return self.related(person_id, RelationType.PARENT)

    def children(self, person_id: str) -> list[str]:
        return self.related(person_id, RelationType.CHILD)

    def spouses(self, person_id: str) -> list[str]:
        return self.related(person_id, RelationType.SPOUSE)

    def siblings(self, person_id: str) -> list[str]:
        return self.related(person_id, RelationType.SIBLING)

    def all_siblings(self, person_id: str) -> list[str]:
        """Declared siblings plus everyone sharing at least one parent, sorted."""
        ids = set(self.siblings(person_id))
        for parent_id in self.parents(person_id):
            ids.update(self.children(parent_id))
        ids.discard(person_id)
        return sorted(ids)

    def neighbors(self, person_id: str) -> list[str]:
        """All ids related to `person_id` by any relation type, sorted."""
        if person_id not in self.graph:
            return []
        return sorted(set(self.graph.successors(person_id)))

    def typed_neighbors(self, person_id: str) -> list[tuple[str, RelationType]]:
        """(id, relation type) pairs for every edge leaving `person_id`, sorted."""
        if person_id not in self.graph:
            return []
        pairs = {
            (v, RelationType(key)) for _, v, key in self.graph.out_edges(person_id, keys=True)
        }
        return sorted(pairs, key=lambda pair: (pair[0], pair[1].value))

    def relation_types(self, source_id: str, target_id: str) -> set[RelationType]:
        """Every type under which `target_id` is related to `source_id`."""
        if not self.graph.has_edge(source_id, target_id):
            return set()
        return {RelationType(key) for key in self.graph[source_id][target_id]}

    def relation_between(self, source_id: str, target_id: str) -> RelationType | None:
        """The most specific relation type from `source_id` to `target_id`, if any."""
        types = self.relation_types(source_id, target_id)
        for relation_type in (
            RelationType.SPOUSE,
            RelationType.PARENT,
            RelationType.CHILD,
            RelationType.SIBLING,
            RelationType.OTHER,
        ):
            if relation_type in types:
                return relation_type
        return None

    def declared_labels(self, source_id: str, target_id: str) -> list[str]:
        """Labels the source itself declared toward the target (not synthesized)."""
        if not self.graph.has_edge(source_id, target_id):
            return []
        labels = []
        for data in self.graph[source_id][target_id].values():
            labels.extend(data.get("labels", ()))
        return sorted(labels)


def build_relation_index(people: Iterable[Person]) -> RelationIndex:
    """
    Build the symmetric relation index for a set of persons.

    Relations whose target is not part of `people` are ignored, as are
    relations from a person to itself. The input records are not modified.

    Args:
        people: The persons taking part in the layout

    Returns:
        A RelationIndex over those persons
    """
    by_id = {p.id: p for p in people}
    G = nx.MultiDiGraph()

    # Add nodes (persons) in id order so graph iteration never depends on input order
    for person_id in sorted(by_id):
        G.add_node(person_id, virtual=by_id[person_id].is_virtual)

    # Add forward edges plus a synthesized reverse edge for each relation
    for person_id in sorted(by_id):
        person = by_id[person_id]
        for relation in person.relations:
            target_id = relation.target_id
            if target_id not in by_id or target_id == person_id:
                continue

            relation_type = relation.relation_type
            _add_typed_edge(G, person_id, target_id, relation_type, label=relation.label)
            _add_typed_edge(G, target_id, person_id, INVERSE_RELATION[relation_type])

    logger.debug(
        "Relation index built: %d persons, %d typed edges", G.number_of_nodes(), G.number_of_edges()
    )
    return RelationIndex(G, by_id)


def _add_typed_edge(
    G: nx.MultiDiGraph,
    u: str,
    v: str,
    relation_type: RelationType,
    label: str | None = None,
):
    key = relation_type.value
    if not G.has_edge(u, v, key=key):
        G.add_edge(u, v, key=key, labels=[], inferred=True)
    if label is not None:
        data = G.edges[u, v, key]
        data["labels"].append(label)
        data["inferred"] = False


@dataclass
class DegreeMap:
    """Breadth-first distances from a root over the relation index."""

    root_id: str
    degrees: dict[str, int]
    generations: dict[str, int]
    predecessors: dict[str, str] = field(default_factory=dict)

    def degree(self, person_id: str) -> int:
        return self.degrees.get(person_id, UNREACHABLE)

    def generation(self, person_id: str) -> int | None:
        return self.generations.get(person_id)

    def is_reachable(self, person_id: str) -> bool:
        return self.degree(person_id) != UNREACHABLE

    def within(self, max_degree: int) -> set[str]:
        """Ids of every person at most `max_degree` steps from the root."""
        return {pid for pid, d in self.degrees.items() if d <= max_degree}

    def path_to(self, person_id: str) -> list[str]:
        """Root-to-person id path along the traversal tree, empty if unreachable."""
        if not self.is_reachable(person_id):
            return []
        path = [person_id]
        while path[-1] != self.root_id:
            path.append(self.predecessors[path[-1]])
        path.reverse()
        return path


def compute_degrees(index: RelationIndex, root_id: str) -> DegreeMap:
    """
    Compute degree of separation and generation offset for every person.

    All relation types count as one step. Neighbours are expanded in id order
    so the traversal tree, and therefore every path, is deterministic.

    Args:
        index: The normalized relation index
        root_id: The person the traversal starts from

    Returns:
        A DegreeMap; persons with no path to the root report UNREACHABLE
    """
    if root_id not in index:
        raise ValueError(f"Person ID {root_id} not found in relation index")

    degrees: dict[str, int] = {pid: UNREACHABLE for pid in index.people}
    generations: dict[str, int] = {}
    predecessors: dict[str, str] = {}

    degrees[root_id] = 0
    generations[root_id] = 0
    visited = {root_id}
    queue = deque([root_id])

    # A dequeue per node is the most a visited-set BFS can do; anything more is a bug
    budget = index.graph.number_of_nodes() + index.graph.number_of_edges() + 1
    steps = 0

    while queue:
        steps += 1
        if steps > budget:
            raise InfiniteLoop(
                f"degree traversal from {root_id} exceeded {budget} steps"
            )

        current = queue.popleft()
        for neighbor, relation_type in index.typed_neighbors(current):
            if neighbor in visited:
                continue
            visited.add(neighbor)
            degrees[neighbor] = degrees[current] + 1
            generations[neighbor] = generations[current] + GENERATION_STEP[relation_type]
            predecessors[neighbor] = current
            queue.append(neighbor)

    unreachable = sum(1 for d in degrees.values() if d == UNREACHABLE)
    if unreachable:
        logger.debug("%d persons are not connected to root %s", unreachable, root_id)

    return DegreeMap(
        root_id=root_id,
        degrees=degrees,
        generations=generations,
        predecessors=predecessors,
    )


def members_within_degree(
    people: Iterable[Person],
    root_id: str,
    max_degree: int,
    degrees: DegreeMap | None = None,
) -> list[Person]:
    """
    Restrict a person set to those within `max_degree` steps of the root.

    Shortest paths to the kept persons only pass through kept persons, so
    degrees are unchanged by the filtering.
    """
    people = list(people)
    if degrees is None:
        degrees = compute_degrees(build_relation_index(people), root_id)
    keep = degrees.within(max_degree)
    return [p for p in people if p.id in keep]


class DegreeCache:
    """
    Caller-owned cache of DegreeMaps keyed by root id.

    The cache knows nothing about the graph it was computed from: call
    `invalidate()` whenever the relations change. Not safe for concurrent
    mutation from several threads.
    """

    def __init__(self):
        self._maps: dict[str, DegreeMap] = {}
        self.hits = 0
        self.misses = 0

    def __contains__(self, root_id: str) -> bool:
        return root_id in self._maps

    def __len__(self) -> int:
        return len(self._maps)

    def get(self, root_id: str) -> DegreeMap | None:
        degree_map = self._maps.get(root_id)
        if degree_map is None:
            self.misses += 1
        else:
            self.hits += 1
        return degree_map

    def put(self, degree_map: DegreeMap):
        self._maps[degree_map.root_id] = degree_map

    def get_or_compute(self, index: RelationIndex, root_id: str) -> DegreeMap:
        degree_map = self.get(root_id)
        if degree_map is None:
            degree_map = compute_degrees(index, root_id)
            self.put(degree_map)
        return degree_map

    def invalidate(self, root_id: str | None = None):
        """Drop the map for `root_id`, or every map when no root is given."""
        if root_id is None:
            self._maps.clear()
            self.hits = 0
            self.misses = 0
        else:
            self._maps.pop(root_id, None)

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 1.0
