"""Dynamic expansion of crowded generations."""

import logging
from statistics import fmean
from typing import TYPE_CHECKING

from collision import POSITION_TOLERANCE

if TYPE_CHECKING:
    from layout import LayoutSession

logger = logging.getLogger(__name__)


def expand_generation(
    xs: list[float], min_spacing: float, expansion_factor: float, pivot: int | None = None
) -> list[float] | None:
    """
    Spread one generation's sorted x values so no two are closer than `min_spacing`.

    When the smallest gap is positive every x is scaled by
    (min_spacing * expansion_factor) / smallest_gap around the value at index
    `pivot`, or around the centroid when no pivot is given. Coincident values
    cannot be scaled apart, so they are swept outward from the pivot instead,
    keeping their order.

    Args:
        xs: x values sorted ascending
        min_spacing: Minimum allowed gap
        expansion_factor: Multiplier applied on top of min_spacing
        pivot: Index of the value that must not move

    Returns:
        The new x values in the same order, or None if no gap is too small
    """
    if len(xs) < 2:
        return None

    min_gap = min(b - a for a, b in zip(xs, xs[1:]))
    if min_gap >= min_spacing - POSITION_TOLERANCE:
        return None

    target = min_spacing * expansion_factor
    if min_gap > POSITION_TOLERANCE:
        centre = xs[pivot] if pivot is not None else fmean(xs)
        scale = target / min_gap
        return [centre + (x - centre) * scale for x in xs]

    if pivot is None:
        centre = fmean(xs)
        pivot = min(range(len(xs)), key=lambda i: (abs(xs[i] - centre), i))

    spread = list(xs)
    for i in range(pivot + 1, len(spread)):
        spread[i] = max(spread[i], spread[i - 1] + target)
    for i in range(pivot - 1, -1, -1):
        spread[i] = min(spread[i], spread[i + 1] - target)
    return spread


def adjust_dynamic_spacing(session: "LayoutSession") -> dict[int, float]:
    """
    Expand every generation whose nodes are packed tighter than min_spacing.

    Each generation is handled once. The root generation expands around the
    root so it stays at x = 0.

    Returns:
        Smallest gap observed before expansion, per expanded generation
    """
    config = session.config
    expanded: dict[int, float] = {}

    for generation in session.slots.generations():
        members = sorted(
            (pid for pid, node in session.nodes.items() if node.generation == generation),
            key=lambda pid: (session.x_of(pid), pid),
        )
        xs = [session.x_of(pid) for pid in members]
        pivot = members.index(session.root_id) if session.root_id in members else None

        spread = expand_generation(xs, config.min_spacing, config.expansion_factor, pivot)
        if spread is None:
            continue

        min_gap = min(b - a for a, b in zip(xs, xs[1:]))
        expanded[generation] = min_gap
        logger.debug(
            "Generation %d is crowded (closest gap %.2f < %.2f); expanded %d nodes",
            generation,
            min_gap,
            config.min_spacing,
            len(members),
        )
        for pid, x in zip(members, spread):
            if abs(x - session.x_of(pid)) > POSITION_TOLERANCE:
                session.move(pid, x)

    return expanded
