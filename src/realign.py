"""Local and global realignment of placed family units."""

import logging
import math
from statistics import fmean
from typing import TYPE_CHECKING, Iterable

from collision import POSITION_TOLERANCE, resolve_block
from errors import InfiniteLoop
from ordering import age_ordered

if TYPE_CHECKING:
    from layout import LayoutSession

logger = logging.getLogger(__name__)

# Passes allowed per generation before global realignment gives up
MAX_REALIGN_PASSES = 10


def centred(centre: float, count: int, spacing: float) -> list[float]:
    """`count` x values `spacing` apart whose mean is `centre`."""
    return [centre + (i - (count - 1) / 2) * spacing for i in range(count)]


def _move_block(
    session: "LayoutSession",
    person_ids: list[str],
    targets: list[float],
    generation: int,
    requested_by: str,
    side: int = 0,
    reorderable: Iterable[str] = (),
) -> bool:
    current = [session.x_of(pid) for pid in person_ids]
    resolved = resolve_block(
        session.slots,
        generation,
        targets,
        session.config.min_spacing,
        requested_by,
        exclude=current,
        side=side,
    )
    if not keeps_sibling_order(session, dict(zip(person_ids, resolved)), reorderable):
        logger.debug("Move of %s would reorder siblings; skipped", requested_by)
        return False

    moved = False
    for pid, old_x, new_x in zip(person_ids, current, resolved):
        if abs(new_x - old_x) > POSITION_TOLERANCE:
            session.move(pid, new_x)
            moved = True
    return moved


# ============================================================================
# Local realignment
# ============================================================================


def sibling_group(session: "LayoutSession", person_id: str) -> list[str]:
    """Placed same-generation siblings of `person_id`, transitively, including itself."""
    generation = session.generation_of(person_id)
    group = {person_id}
    frontier = [person_id]
    while frontier:
        current = frontier.pop()
        for sibling in session.index.all_siblings(current):
            if (
                sibling not in group
                and session.is_placed(sibling)
                and session.generation_of(sibling) == generation
            ):
                group.add(sibling)
                frontier.append(sibling)
    return sorted(group)


def keeps_sibling_order(
    session: "LayoutSession", moves: dict[str, float], reorderable: Iterable[str] = ()
) -> bool:
    """
    False if moving nodes to the x values in `moves` would swap two placed siblings.

    Pairs with both members in `reorderable` may swap.
    """
    reorderable = set(reorderable)
    for person_id in sorted(moves):
        old_x, new_x = session.x_of(person_id), moves[person_id]
        for sibling in sibling_group(session, person_id):
            if sibling == person_id or (person_id in reorderable and sibling in reorderable):
                continue
            sibling_old = session.x_of(sibling)
            sibling_new = moves.get(sibling, sibling_old)
            if (old_x < sibling_old) != (new_x < sibling_new):
                return False
    return True


def slots_clear(session: "LayoutSession", moves: dict[str, float]) -> bool:
    """True if every moved node lands at least min_spacing away from the nodes staying put."""
    by_generation: dict[int, list[str]] = {}
    for person_id in moves:
        by_generation.setdefault(session.generation_of(person_id), []).append(person_id)

    for generation, person_ids in by_generation.items():
        leaving = [session.x_of(pid) for pid in person_ids]
        for pid in person_ids:
            if not session.slots.is_free(
                generation, moves[pid], session.config.min_spacing, exclude=leaving
            ):
                return False
    return True


def _family_units(
    session: "LayoutSession", siblings: list[str], generation: int
) -> list[list[tuple[str, float]]]:
    """Each sibling with its placed same-generation spouses, as (id, offset) pairs."""
    assigned = set(siblings)
    units = []
    for sibling in siblings:
        unit = [(sibling, 0.0)]
        for spouse in session.placed(session.index.spouses(sibling)):
            if spouse in assigned or session.generation_of(spouse) != generation:
                continue
            unit.append((spouse, session.x_of(spouse) - session.x_of(sibling)))
            assigned.add(spouse)
        units.append(unit)
    return units


def realign_siblings(session: "LayoutSession", person_id: str) -> bool:
    """Re-sort the sibling group of `person_id` by age and lay it out evenly."""
    group = sibling_group(session, person_id)
    if len(group) < 2:
        return False

    generation = session.generation_of(person_id)
    order = age_ordered(group, session.people, session.x_positions())
    units = _family_units(session, order, generation)

    # Lay the units out left to right starting at 0
    targets: dict[str, float] = {}
    cursor = 0.0
    for unit in units:
        left = min(offset for _, offset in unit)
        right = max(offset for _, offset in unit)
        base = cursor - left
        for member, offset in unit:
            targets[member] = base + offset
        cursor = base + right + session.config.base_spacing

    members = list(targets)
    anchored = [m for m in members if m in session.anchored]
    if anchored:
        shifts = [session.x_of(m) - targets[m] for m in anchored]
        if max(shifts) - min(shifts) > POSITION_TOLERANCE:
            return False
        # Anchored nodes stay exactly where they are; the rest keep to their side of them
        shift = shifts[0]
        low = min(targets[m] for m in anchored) - POSITION_TOLERANCE
        high = max(targets[m] for m in anchored) + POSITION_TOLERANCE
        left_block = [m for m in members if targets[m] < low]
        right_block = [m for m in members if targets[m] > high]

        moved = False
        for member in members:
            if member in session.anchored or member in left_block or member in right_block:
                continue
            move = {member: targets[member] + shift}
            if (
                abs(move[member] - session.x_of(member)) > POSITION_TOLERANCE
                and slots_clear(session, move)
                and keeps_sibling_order(session, move, group)
            ):
                session.move(member, move[member])
                moved = True
        for block, side in ((left_block, -1), (right_block, 1)):
            if block:
                moved |= _move_block(
                    session,
                    block,
                    [targets[m] + shift for m in block],
                    generation,
                    person_id,
                    side=side,
                    reorderable=group,
                )
        return moved

    parents = set()
    for sibling in group:
        parents.update(session.placed(session.index.parents(sibling)))
    if parents:
        centre = fmean(session.x_of(p) for p in sorted(parents))
    else:
        centre = fmean(session.x_of(s) for s in group)
    shift = centre - fmean(targets[s] for s in group)

    return _move_block(
        session,
        members,
        [targets[m] + shift for m in members],
        generation,
        person_id,
        reorderable=group,
    )


def realign_parents_of(session: "LayoutSession", person_id: str) -> bool:
    """Re-centre the placed parents of `person_id` over all their placed children."""
    index = session.index
    parents = session.placed(index.parents(person_id))
    if not parents or any(p in session.anchored for p in parents):
        return False
    generations = {session.generation_of(p) for p in parents}
    if len(generations) != 1:
        return False

    children = set()
    for parent_id in parents:
        children.update(session.placed(index.children(parent_id)))
    centroid = fmean(session.x_of(c) for c in sorted(children))

    ordered = sorted(parents, key=lambda p: (session.x_of(p), p))
    targets = centred(centroid, len(ordered), session.config.spouse_spacing)
    return _move_block(session, ordered, targets, generations.pop(), person_id)


def realign_as_parent(session: "LayoutSession", person_id: str) -> bool:
    """Re-centre `person_id` and its placed spouse over its placed children."""
    index = session.index
    children = session.placed(index.children(person_id))
    if not children:
        return False

    generation = session.generation_of(person_id)
    couple = [person_id]
    spouses = [
        s for s in session.placed(index.spouses(person_id)) if session.generation_of(s) == generation
    ]
    if spouses:
        sharing = [s for s in spouses if set(index.children(s)) & set(children)]
        couple.append((sharing or spouses)[0])
    if any(p in session.anchored for p in couple):
        return False

    centroid = fmean(session.x_of(c) for c in children)
    ordered = sorted(couple, key=lambda p: (session.x_of(p), p))
    targets = centred(centroid, len(ordered), session.config.spouse_spacing)
    return _move_block(session, ordered, targets, generation, person_id)


def realign_local(session: "LayoutSession", person_id: str):
    """
    Tidy the immediate family unit of a node that was just placed.

    Runs the sibling pass, then re-centres the node's parents over their
    children, then re-centres the node (and spouse) over its own children.
    Nothing outside that family unit moves, and anchored nodes never move.
    """
    if realign_siblings(session, person_id):
        logger.debug("Realigned siblings of %s", person_id)
    if realign_parents_of(session, person_id):
        logger.debug("Re-centred parents of %s", person_id)
    if realign_as_parent(session, person_id):
        logger.debug("Re-centred %s over its children", person_id)


# ============================================================================
# Global realignment
# ============================================================================


def family_units(session: "LayoutSession") -> dict[tuple[str, ...], list[str]]:
    """Placed children grouped by their set of placed parents."""
    units: dict[tuple[str, ...], list[str]] = {}
    for person_id in sorted(session.nodes):
        parents = tuple(session.placed(session.index.parents(person_id)))
        if parents:
            units.setdefault(parents, []).append(person_id)
    return units


def owning_units(units: dict[tuple[str, ...], list[str]]) -> dict[str, tuple[str, ...]]:
    """The unit each parent is centred over: most children, then lowest key."""
    owners: dict[str, tuple[str, ...]] = {}
    for key in sorted(units, key=lambda k: (-len(units[k]), k)):
        for parent_id in key:
            owners.setdefault(parent_id, key)
    return owners


def _descendants(session: "LayoutSession", person_ids: list[str]) -> list[str]:
    floor = min(session.generation_of(pid) for pid in person_ids)
    found: set[str] = set()
    frontier = list(person_ids)
    while frontier:
        current = frontier.pop()
        for child in session.placed(session.index.children(current)):
            if (
                child not in found
                and child not in person_ids
                and child not in session.anchored
                and session.generation_of(child) < floor
            ):
                found.add(child)
                frontier.append(child)
    return sorted(found)


def _shift_children(session: "LayoutSession", parents: tuple[str, ...], children: list[str]) -> bool:
    """Slide a children block, and their placed descendants, beneath fixed parents."""
    if any(c in session.anchored for c in children):
        return False

    target = fmean(session.x_of(p) for p in parents)
    centroid = fmean(session.x_of(c) for c in children)
    if abs(target - centroid) <= POSITION_TOLERANCE:
        return False

    generation = session.generation_of(children[0])
    current = [session.x_of(c) for c in children]
    resolved = resolve_block(
        session.slots,
        generation,
        [x + target - centroid for x in current],
        session.config.min_spacing,
        children[0],
        exclude=current,
    )
    delta = resolved[0] - current[0]
    if abs(target - (centroid + delta)) >= abs(target - centroid) - POSITION_TOLERANCE:
        return False

    moves = {
        pid: session.x_of(pid) + delta for pid in children + _descendants(session, children)
    }
    if not slots_clear(session, moves) or not keeps_sibling_order(session, moves):
        return False

    for person_id, x in moves.items():
        session.move(person_id, x)
    return True


def _sibling_bounds(
    session: "LayoutSession", person_id: str, moving: list[str]
) -> tuple[float, float]:
    """Range of x that keeps `person_id` between its nearest placed siblings that stay put."""
    x = session.x_of(person_id)
    gap = session.config.min_spacing
    low, high = -math.inf, math.inf
    for sibling in sibling_group(session, person_id):
        if sibling in moving:
            continue
        other = session.x_of(sibling)
        if other < x:
            low = max(low, other + gap)
        elif other > x:
            high = min(high, other - gap)
    return low, high


def _centre_parents(
    session: "LayoutSession",
    parents: tuple[str, ...],
    children: list[str],
    owners: dict[str, tuple[str, ...]],
) -> bool:
    """Move the parents this unit owns toward the children's centroid."""
    owned = [p for p in parents if owners.get(p) == parents]
    generations = {session.generation_of(p) for p in parents}
    if not owned or len(generations) != 1:
        return False

    centroid = fmean(session.x_of(c) for c in children)
    ordered = sorted(parents, key=lambda p: (session.x_of(p), p))
    targets = dict(zip(ordered, centred(centroid, len(ordered), session.config.spouse_spacing)))
    moving = [p for p in ordered if p in owned]

    # Stop short of each parent's own siblings
    shift_low, shift_high = -math.inf, math.inf
    for parent_id in moving:
        low, high = _sibling_bounds(session, parent_id, moving)
        shift_low = max(shift_low, low - targets[parent_id])
        shift_high = min(shift_high, high - targets[parent_id])
    if shift_low > shift_high:
        return False
    shift = min(max(0.0, shift_low), shift_high)

    resolved = resolve_block(
        session.slots,
        generations.pop(),
        [targets[p] + shift for p in moving],
        session.config.min_spacing,
        moving[0],
        exclude=[session.x_of(p) for p in moving],
    )
    if not keeps_sibling_order(session, dict(zip(moving, resolved))):
        return False

    proposed = {p: session.x_of(p) for p in ordered}
    proposed.update(zip(moving, resolved))

    before = abs(fmean(session.x_of(p) for p in ordered) - centroid)
    after = abs(fmean(proposed.values()) - centroid)
    if after >= before - POSITION_TOLERANCE:
        return False

    for person_id in moving:
        session.move(person_id, proposed[person_id])
    return True


def realign_global(session: "LayoutSession") -> int:
    """
    Centre every family unit's parents over its children, bottom-up.

    Generations are processed from the outermost descendant generation toward
    the outermost ancestor generation. Within one generation the units are
    revisited until nothing moves.

    Returns:
        The total number of passes that moved something

    Raises:
        InfiniteLoop: a generation still moves after MAX_REALIGN_PASSES passes
    """
    units = family_units(session)
    owners = owning_units(units)
    generations = sorted({session.generation_of(c) for kids in units.values() for c in kids})

    moving_passes = 0
    for generation in generations:
        level = {}
        for key, kids in units.items():
            in_generation = [c for c in kids if session.generation_of(c) == generation]
            if in_generation:
                level[key] = in_generation

        for _ in range(MAX_REALIGN_PASSES):
            changed = False
            for parents in sorted(level):
                children = level[parents]
                if any(p in session.anchored for p in parents):
                    changed |= _shift_children(session, parents, children)
                else:
                    changed |= _centre_parents(session, parents, children, owners)
            if not changed:
                break
            moving_passes += 1
        else:
            raise InfiniteLoop(
                f"global realignment of generation {generation} did not settle "
                f"after {MAX_REALIGN_PASSES} passes"
            )

    logger.debug(
        "Global realignment: %d units, %d moving passes", len(units), moving_passes
    )
    return moving_passes
