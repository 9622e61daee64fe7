"""Random selection: surfacing a random record and the wheel of fortune."""

from __future__ import annotations

import logging
import math
import random
from typing import Sequence, TypeVar

from daybook.errors import EmptyCandidatesError
from daybook.models import Record, WheelSpin

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 10


def pick(
    candidates: Sequence[T],
    previous: T | None = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    rng: random.Random | None = None,
    weights: Sequence[float] | None = None,
) -> T:
    """Draw one candidate, avoiding an immediate repeat of *previous*.

    Redraws at most *max_attempts* times; after that a repeat is accepted.
    """
    if not candidates:
        raise EmptyCandidatesError("No candidates to pick from")
    rng = rng or random.Random()

    def draw() -> T:
        if weights is not None:
            return rng.choices(candidates, weights=weights, k=1)[0]
        return rng.choice(candidates)

    choice = draw()
    if previous is None or len(candidates) < 2:
        return choice
    attempts = 0
    while choice == previous and attempts < max_attempts:
        choice = draw()
        attempts += 1
    if choice == previous:
        logger.debug("Accepting repeat pick after %d redraws", attempts)
    return choice


def segment_index(pointer_angle: float, segment_count: int) -> int:
    """Map a pointer angle in degrees to a wheel segment, clamped to [0, n-1]."""
    if segment_count <= 0:
        raise EmptyCandidatesError("Wheel has no segments")
    index = math.floor(pointer_angle / (360.0 / segment_count))
    return min(max(index, 0), segment_count - 1)


def pointer_angle_for(rotation: float) -> float:
    """Angle under the fixed top pointer after the wheel turned *rotation* degrees."""
    wheel_angle = rotation % 360.0
    return (360.0 - wheel_angle) % 360.0


def spin_wheel(
    records: Sequence[Record],
    rng: random.Random | None = None,
    min_turns: int = 3,
    max_turns: int = 6,
) -> WheelSpin:
    """Spin the wheel over *records* (one segment each) and report where it stopped."""
    if not records:
        raise EmptyCandidatesError("Wheel has no segments")
    rng = rng or random.Random()
    rotation = rng.uniform(min_turns, max_turns) * 360.0 + rng.uniform(0.0, 360.0)
    pointer = pointer_angle_for(rotation)
    index = segment_index(pointer, len(records))
    logger.debug("Wheel stopped at %.1f degrees, segment %d of %d", pointer, index, len(records))
    return WheelSpin(rotation=rotation, pointer_angle=pointer, segment_index=index, record=records[index])
