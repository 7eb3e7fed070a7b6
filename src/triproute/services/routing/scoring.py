"""Cost functions for candidate visiting orders."""

from __future__ import annotations

from typing import Mapping, Sequence

from ...models.domain import SECONDS_PER_HOUR, ActivityNode
from .weights import TravelWeights

# Any lateness costs at least a full day so an on-time plan always wins.
LATE_PENALTY_SECONDS = 24 * SECONDS_PER_HOUR


def score_ordering(indices: Sequence[int], weights: TravelWeights) -> float:
    """Total travel seconds for spots visited in ``indices`` order, anchors included."""
    if not indices:
        return 0.0
    total = weights.start[indices[0]]
    for current, following in zip(indices, indices[1:]):
        total += weights.matrix[current][following]
    return total + weights.end[indices[-1]]


def has_fixed_start(activity: ActivityNode) -> bool:
    # A start time of 0 means "not set".
    return activity.start_time is not None and activity.start_time > 0


def has_fixed_times(activities: Sequence[ActivityNode]) -> bool:
    return any(has_fixed_start(activity) for activity in activities)


def score_schedule(
    sequence: Sequence[ActivityNode],
    index_of: Mapping[int, int],
    weights: TravelWeights,
    day_start_hours: float = 0.0,
) -> float:
    """Elapsed seconds for the whole day plus lateness against fixed start times.

    Travel is added when a spot is reached. An activity with a fixed start time
    waits for it, or accrues lateness when the clock is already past it. Every
    activity then occupies its own duration.
    """
    day_start = day_start_hours * SECONDS_PER_HOUR
    clock = day_start
    lateness = 0.0
    previous: int | None = None
    for activity in sequence:
        if activity.is_spot:
            index = index_of[activity.activity_id]
            clock += weights.start[index] if previous is None else weights.matrix[previous][index]
            previous = index
        if has_fixed_start(activity):
            fixed = activity.start_time * SECONDS_PER_HOUR
            if clock > fixed:
                lateness += clock - fixed
            else:
                clock = fixed
        clock += activity.duration_hours * SECONDS_PER_HOUR
    if previous is not None:
        clock += weights.end[previous]
    if lateness > 0:
        lateness += LATE_PENALTY_SECONDS
    return clock - day_start + lateness
