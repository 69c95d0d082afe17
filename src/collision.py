"""Occupied x slots per generation and nearest-free-slot search."""

from collections import Counter, defaultdict
import logging
import math
from typing import Iterable, Iterator

from errors import PlacementFailed

logger = logging.getLogger(__name__)

# Probe step as a fraction of min_spacing
COLLISION_STEP_FRACTION = 0.25

# Two x values closer than this are the same position
POSITION_TOLERANCE = 1e-6


class OccupiedSlots:
    """Multiset of occupied x values, one per placed node, grouped by generation."""

    def __init__(self):
        self._slots: dict[int, Counter] = defaultdict(Counter)

    def mark(self, generation: int, x: float):
        self._slots[generation][x] += 1

    def unmark(self, generation: int, x: float):
        counts = self._slots.get(generation)
        if not counts or counts[x] <= 0:
            raise ValueError(f"No occupied slot at x={x} in generation {generation}")
        counts[x] -= 1
        if counts[x] == 0:
            del counts[x]

    def occupied(self, generation: int, exclude: Iterable[float] = ()) -> list[float]:
        """Sorted occupied x values, minus one occurrence of each excluded value."""
        counts = Counter(self._slots.get(generation, {}))
        counts.subtract(exclude)
        return sorted(x for x, n in counts.items() for _ in range(max(n, 0)))

    def count(self, generation: int | None = None) -> int:
        if generation is None:
            return sum(sum(c.values()) for c in self._slots.values())
        return sum(self._slots.get(generation, {}).values())

    def generations(self) -> list[int]:
        return sorted(g for g, counts in self._slots.items() if counts)

    def is_free(
        self, generation: int, x: float, min_spacing: float, exclude: Iterable[float] = ()
    ) -> bool:
        return all(
            abs(x - other) >= min_spacing - POSITION_TOLERANCE
            for other in self.occupied(generation, exclude)
        )


def max_probes(occupied: int, width: float = 0.0, min_spacing: float = 1.0) -> int:
    """
    Probe budget for a search among `occupied` slots.

    For a single node this is 2 * ceil(2 / COLLISION_STEP_FRACTION) * (occupied + 1) + 2.
    Wider blocks get proportionally more room.
    """
    reach = 2 + width / min_spacing
    return 2 * math.ceil(reach / COLLISION_STEP_FRACTION) * (occupied + 1) + 2


def probe_offsets(step: float, side: int = 0) -> Iterator[float]:
    """0, +step, -step, +2*step, -2*step, ... or only one sign when `side` is +1 or -1."""
    yield 0.0
    k = 1
    while True:
        if side >= 0:
            yield k * step
        if side <= 0:
            yield -k * step
        k += 1


def resolve_block(
    slots: OccupiedSlots,
    generation: int,
    xs: list[float],
    min_spacing: float,
    person_id: str,
    exclude: Iterable[float] = (),
    limit: int | None = None,
    side: int = 0,
) -> list[float]:
    """
    Find the nearest offset at which every x in `xs` is free.

    The group is moved as one piece so internal offsets are kept. Slots in
    `exclude` (typically the group's own current positions) are not treated as
    occupied.

    Args:
        slots: Occupied slots of the current layout session
        generation: Generation the group lives in
        xs: Preferred x values of the group members
        min_spacing: Minimum horizontal distance between two nodes
        person_id: Person reported in PlacementFailed
        exclude: Occupied values to ignore
        limit: Probe budget override
        side: +1 or -1 to search only rightward or leftward of `xs`

    Returns:
        The shifted x values, in the order given
    """
    if not xs or not all(math.isfinite(x) for x in xs):
        raise PlacementFailed(person_id, f"no finite target x in generation {generation}")

    others = slots.occupied(generation, exclude)
    if limit is None:
        limit = max_probes(len(others), max(xs) - min(xs), min_spacing)

    step = min_spacing * COLLISION_STEP_FRACTION
    for probe, offset in enumerate(probe_offsets(step, side)):
        if probe >= limit:
            raise PlacementFailed(
                person_id,
                f"no free slot near x={xs[0]:.1f} in generation {generation} after {limit} probes",
            )
        candidate = [x + offset for x in xs]
        if all(
            abs(x - other) >= min_spacing - POSITION_TOLERANCE for x in candidate for other in others
        ):
            if offset:
                logger.debug(
                    "Collision for %s in generation %d: shifted by %.2f",
                    person_id,
                    generation,
                    offset,
                )
            return candidate


def resolve_collision(
    slots: OccupiedSlots,
    generation: int,
    x: float,
    min_spacing: float,
    person_id: str,
    exclude: Iterable[float] = (),
    limit: int | None = None,
) -> float:
    """Nearest x to `x` in `generation` at least `min_spacing` away from every occupied slot."""
    return resolve_block(slots, generation, [x], min_spacing, person_id, exclude, limit)[0]
