"""Position strategies for persons placed after the root and its first spouse."""

from dataclasses import dataclass
import logging
from statistics import fmean
from typing import TYPE_CHECKING, Callable

from ordering import age_ordered

if TYPE_CHECKING:
    from layout import LayoutSession

logger = logging.getLogger(__name__)

SPOUSE_ADJACENT = "spouse-adjacent"
CHILD_BELOW_PARENTS = "child-below-parents"
PARENT_ABOVE_CHILDREN = "parent-above-children"
SIBLING_ADJACENT = "sibling-adjacent"
FALLBACK = "fallback"


@dataclass(frozen=True)
class Placement:
    """Preferred slot for a candidate, before collision resolution."""

    strategy: str
    generation: int
    x: float


def _closest(session: "LayoutSession", person_ids: list[str]) -> str:
    return min(person_ids, key=lambda pid: (session.degrees.degree(pid), pid))


def _beside_block(session: "LayoutSession", person_id: str, block: list[str]) -> float:
    """x next to an age-ordered sibling block, at the candidate's place in the order."""
    order = age_ordered(block + [person_id], session.people, session.x_positions())
    i = order.index(person_id)
    spacing = session.config.base_spacing
    if i > 0:
        return session.x_of(order[i - 1]) + spacing
    return session.x_of(order[1]) - spacing


def spouse_adjacent(session: "LayoutSession", person_id: str) -> Placement | None:
    index = session.index
    spouses = session.placed(index.spouses(person_id))
    if not spouses:
        return None

    spouse_id = _closest(session, spouses)
    generation = session.generation_of(spouse_id)
    spouse_x = session.x_of(spouse_id)
    offset = session.config.spouse_spacing

    # Go left only when the couple's children already sit left of the spouse
    shared = session.placed(set(index.children(person_id)) & set(index.children(spouse_id)))
    prefer_left = bool(shared) and fmean(session.x_of(c) for c in shared) < spouse_x
    sides = [spouse_x - offset, spouse_x + offset]
    if not prefer_left:
        sides.reverse()

    for x in sides:
        if session.slots.is_free(generation, x, session.config.min_spacing):
            return Placement(SPOUSE_ADJACENT, generation, x)
    return Placement(SPOUSE_ADJACENT, generation, sides[0])


def child_below_parents(session: "LayoutSession", person_id: str) -> Placement | None:
    index = session.index
    declared = index.parents(person_id)
    parents = session.placed(declared)
    if not parents:
        return None

    # A lone parent's only placed spouse is taken as the other parent
    if len(parents) == 1 and len(declared) == 1:
        co_parents = [s for s in session.placed(index.spouses(parents[0])) if s != person_id]
        if len(co_parents) == 1:
            parents.append(co_parents[0])

    generation = min(session.generation_of(p) for p in parents) - 1
    x = fmean(session.x_of(p) for p in parents)

    own_children = session.placed(index.children(person_id))
    if own_children:
        x = (x + fmean(session.x_of(c) for c in own_children)) / 2

    siblings = set()
    for parent_id in parents:
        siblings.update(index.children(parent_id))
    siblings.discard(person_id)
    block = [s for s in session.placed(siblings) if session.generation_of(s) == generation]
    if block:
        x = _beside_block(session, person_id, block)

    return Placement(CHILD_BELOW_PARENTS, generation, x)


def parent_above_children(session: "LayoutSession", person_id: str) -> Placement | None:
    index = session.index
    children = session.placed(index.children(person_id))
    if not children:
        return None

    generation = max(session.generation_of(c) for c in children) + 1
    x = fmean(session.x_of(c) for c in children)

    # Leave room for the spouse so the couple straddles the children
    if index.spouses(person_id):
        x -= session.config.spouse_spacing / 2

    return Placement(PARENT_ABOVE_CHILDREN, generation, x)


def sibling_adjacent(session: "LayoutSession", person_id: str) -> Placement | None:
    siblings = session.placed(session.index.all_siblings(person_id))
    if not siblings:
        return None

    generation = session.generation_of(_closest(session, siblings))
    block = [s for s in siblings if session.generation_of(s) == generation]
    return Placement(SIBLING_ADJACENT, generation, _beside_block(session, person_id, block))


def fallback(session: "LayoutSession", person_id: str) -> Placement:
    relatives = session.placed(session.index.neighbors(person_id))
    reference = _closest(session, relatives) if relatives else session.root_id
    return Placement(
        FALLBACK,
        session.generation_of(reference),
        session.x_of(reference) + session.config.base_spacing,
    )


STRATEGIES: tuple[Callable[["LayoutSession", str], Placement | None], ...] = (
    spouse_adjacent,
    child_below_parents,
    parent_above_children,
    sibling_adjacent,
)


def resolve_position(session: "LayoutSession", person_id: str) -> Placement:
    """
    Preferred generation and x for `person_id`; the first matching strategy wins.

    Strategies are tried in order: spouse-adjacent, child-below-parents,
    parent-above-children, sibling-adjacent, then fallback, which always matches.
    """
    for strategy in STRATEGIES:
        placement = strategy(session, person_id)
        if placement is not None:
            break
    else:
        placement = fallback(session, person_id)

    logger.debug(
        "%s -> %s (generation %d, x=%.2f)",
        person_id,
        placement.strategy,
        placement.generation,
        placement.x,
    )
    return placement
