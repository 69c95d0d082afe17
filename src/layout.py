"""Layout session and public entry points of the family tree layout engine."""

from dataclasses import dataclass, replace
from datetime import date
import logging
from typing import Iterable

from collision import OccupiedSlots, resolve_collision
from config import LayoutConfiguration
from errors import EmptyMemberList, InvalidTreeData, LayoutError, RootNotFound
from graph import (
    DegreeCache,
    DegreeMap,
    build_relation_index,
    compute_degrees,
    members_within_degree,
)
from models import NodePosition, Person
from placement import resolve_position
from priority import placement_order
from realign import realign_global, realign_local
from relationships import DEFAULT_LANGUAGE, describe_relationship, relationship_label
from spacing import adjust_dynamic_spacing

logger = logging.getLogger(__name__)


@dataclass
class LayoutOutcome:
    positions: list[NodePosition]
    steps: list[list[NodePosition]]


@dataclass
class LayoutResult:
    """Result-value form of a layout run: exactly one of outcome / error is set."""

    outcome: LayoutOutcome | None = None
    error: LayoutError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def validate_members(people: list[Person], root_id: str):
    """Raise the matching LayoutError if `people` cannot be laid out around `root_id`."""
    if not people:
        raise EmptyMemberList()

    seen: set[str] = set()
    duplicates: set[str] = set()
    for person in people:
        if person.id in seen:
            duplicates.add(person.id)
        seen.add(person.id)
    if duplicates:
        raise InvalidTreeData(f"duplicate person ids: {', '.join(sorted(duplicates))}")

    if root_id not in seen:
        raise RootNotFound(root_id)


class LayoutSession:
    """
    Mutable state of one layout run.

    Holds the relation index, degrees, occupied slots, placed nodes and
    recorded snapshots. Created per call and discarded afterwards; nothing
    here is shared between runs.
    """

    def __init__(
        self,
        people: list[Person],
        root_id: str,
        config: LayoutConfiguration,
        language: str = DEFAULT_LANGUAGE,
        degrees: DegreeMap | None = None,
    ):
        self.people = {p.id: p for p in people}
        self.root_id = root_id
        self.config = config
        self.language = language
        self.index = build_relation_index(people)
        self.degrees = degrees if degrees is not None else compute_degrees(self.index, root_id)

        self.slots = OccupiedSlots()
        self.nodes: dict[str, NodePosition] = {}
        self.anchored: set[str] = set()
        self.strategies: dict[str, str] = {}
        self.snapshots: list[list[NodePosition]] = []

    # Queries used by the placement and realignment passes

    def is_placed(self, person_id: str) -> bool:
        return person_id in self.nodes

    def placed(self, person_ids: Iterable[str]) -> list[str]:
        """The placed subset of `person_ids`, sorted."""
        return sorted(pid for pid in set(person_ids) if pid in self.nodes)

    def x_of(self, person_id: str) -> float:
        return self.nodes[person_id].x

    def generation_of(self, person_id: str) -> int:
        return self.nodes[person_id].generation

    def x_positions(self) -> dict[str, float]:
        return {pid: node.x for pid, node in self.nodes.items()}

    def y_for(self, generation: int) -> float:
        return -generation * self.config.vertical_spacing or 0.0

    # Mutations

    def place(self, person_id: str, x: float, generation: int, strategy: str) -> NodePosition:
        x = float(x) or 0.0
        info = describe_relationship(self.index, self.degrees, person_id)
        node = NodePosition(
            person=self.people[person_id],
            x=x,
            y=self.y_for(generation),
            generation=generation,
            relationship=info,
            label=relationship_label(info, self.language),
        )
        self.nodes[person_id] = node
        self.slots.mark(generation, x)
        self.strategies[person_id] = strategy
        return node

    def move(self, person_id: str, x: float):
        node = self.nodes[person_id]
        x = float(x) or 0.0
        self.slots.unmark(node.generation, node.x)
        self.slots.mark(node.generation, x)
        node.x = x

    def snapshot(self) -> list[NodePosition]:
        """Copies of every placed node, in placement order."""
        return [replace(node) for node in self.nodes.values()]

    def record(self):
        self.snapshots.append(self.snapshot())

    # Run

    def place_root(self) -> list[str]:
        """Place the root and its first spouse; both are anchored. Returns their ids."""
        self.place(self.root_id, 0.0, 0, "root")
        self.anchored.add(self.root_id)

        spouses = self.index.spouses(self.root_id)
        if not spouses:
            return [self.root_id]

        first = min(
            spouses,
            key=lambda pid: (self.people[pid].marriage_date or date.max, pid),
        )
        self.place(first, self.config.spouse_spacing, 0, "root-spouse")
        self.anchored.add(first)
        return [self.root_id, first]

    def run(self) -> LayoutOutcome:
        placed_first = self.place_root()
        self.record()

        pending = [pid for pid in self.people if pid not in placed_first]
        for person_id in placement_order(pending, self.index, self.degrees):
            placement = resolve_position(self, person_id)
            x = resolve_collision(
                self.slots,
                placement.generation,
                placement.x,
                self.config.min_spacing,
                person_id,
            )
            self.place(person_id, x, placement.generation, placement.strategy)
            realign_local(self, person_id)
            self.record()

        realign_global(self)
        adjust_dynamic_spacing(self)

        positions = self.snapshot()
        if [n.key() for n in positions] != [n.key() for n in self.snapshots[-1]]:
            self.snapshots.append(self.snapshot())

        logger.info(
            "Laid out %d persons around %s in %d steps",
            len(positions),
            self.root_id,
            len(self.snapshots),
        )
        return LayoutOutcome(positions=positions, steps=self.snapshots)


def compute_layout(
    people: Iterable[Person],
    root_id: str,
    config: LayoutConfiguration | None = None,
    language: str = DEFAULT_LANGUAGE,
    degree_cache: DegreeCache | None = None,
    max_degree: int | None = None,
) -> LayoutOutcome:
    """
    Lay out a family tree around `root_id`.

    Args:
        people: Every person to place; relations to persons outside this set are ignored
        root_id: Id of the person placed at (0, 0)
        config: Spacing options, defaults to LayoutConfiguration()
        language: Language of the relationship labels; never affects coordinates
        degree_cache: Optional caller-owned cache of degree maps keyed by root id
        max_degree: Only lay out persons at most this many steps from the root

    Returns:
        LayoutOutcome with the final positions and the incremental snapshots

    Raises:
        EmptyMemberList, InvalidTreeData, RootNotFound, PlacementFailed, InfiniteLoop
    """
    people = list(people)
    validate_members(people, root_id)
    config = config or LayoutConfiguration()

    degrees = None
    if degree_cache is not None or max_degree is not None:
        index = build_relation_index(people)
        if degree_cache is not None:
            degrees = degree_cache.get_or_compute(index, root_id)
        else:
            degrees = compute_degrees(index, root_id)
        if max_degree is not None:
            people = members_within_degree(people, root_id, max_degree, degrees=degrees)

    return LayoutSession(people, root_id, config, language, degrees).run()


def layout_tree(
    people: Iterable[Person],
    root_id: str,
    config: LayoutConfiguration | None = None,
    language: str = DEFAULT_LANGUAGE,
    degree_cache: DegreeCache | None = None,
    max_degree: int | None = None,
) -> list[NodePosition]:
    """Final positions only, one NodePosition per person."""
    return compute_layout(people, root_id, config, language, degree_cache, max_degree).positions


def layout_tree_incremental(
    people: Iterable[Person],
    root_id: str,
    config: LayoutConfiguration | None = None,
    language: str = DEFAULT_LANGUAGE,
    degree_cache: DegreeCache | None = None,
    max_degree: int | None = None,
) -> list[list[NodePosition]]:
    """The snapshot sequence; its last element equals the final layout."""
    return compute_layout(people, root_id, config, language, degree_cache, max_degree).steps


def try_layout(
    people: Iterable[Person],
    root_id: str,
    config: LayoutConfiguration | None = None,
    language: str = DEFAULT_LANGUAGE,
    degree_cache: DegreeCache | None = None,
    max_degree: int | None = None,
) -> LayoutResult:
    """compute_layout, with layout failures returned instead of raised."""
    try:
        outcome = compute_layout(people, root_id, config, language, degree_cache, max_degree)
    except LayoutError as e:
        logger.debug("Layout around %s failed: %s", root_id, e)
        return LayoutResult(error=e)
    return LayoutResult(outcome=outcome)
