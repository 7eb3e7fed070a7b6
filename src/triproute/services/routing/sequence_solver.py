"""Exhaustive visit-order search for the spots of a single day.

Only spots move. Activities without a location keep their absolute position in
the day and the optimised spots fill the remaining positions.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from itertools import islice
from typing import Callable, Iterator, Mapping, Sequence, TypeVar

from ...models.domain import ActivityNode
from .errors import SuggestionTimeout
from .scoring import has_fixed_times, score_ordering, score_schedule
from .weights import TravelWeights

DEFAULT_BRUTE_FORCE_THRESHOLD = 7

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class SolverResult:
    sequence: list[ActivityNode]
    score: float
    baseline_score: float
    evaluated: int
    exhaustive: bool


def heap_permutations(items: Sequence[T]) -> Iterator[tuple[T, ...]]:
    """Yield every permutation of ``items`` using the iterative form of Heap's algorithm.

    The first permutation is the input order. Each later one differs from the
    previous by a single swap.
    """
    current = list(items)
    n = len(current)
    counters = [0] * n
    yield tuple(current)

    i = 0
    while i < n:
        if counters[i] < i:
            if i % 2 == 0:
                current[0], current[i] = current[i], current[0]
            else:
                current[counters[i]], current[i] = current[i], current[counters[i]]
            yield tuple(current)
            counters[i] += 1
            i = 0
        else:
            counters[i] = 0
            i += 1


def merge_spots(baseline: Sequence[ActivityNode], spots: Sequence[ActivityNode]) -> list[ActivityNode]:
    """Put ``spots`` into the spot positions of ``baseline``, leaving other activities in place."""
    remaining = iter(spots)
    return [next(remaining) if activity.is_spot else activity for activity in baseline]


def _cost_function(
    baseline: Sequence[ActivityNode],
    index_of: Mapping[int, int],
    weights: TravelWeights,
    day_start_hours: float | None,
) -> Callable[[Sequence[ActivityNode]], float]:
    if has_fixed_times(baseline):
        start_hours = day_start_hours or 0.0
        return lambda spots: score_schedule(merge_spots(baseline, spots), index_of, weights, start_hours)
    return lambda spots: score_ordering([index_of[spot.activity_id] for spot in spots], weights)


def solve_order(
    activities: Sequence[ActivityNode],
    index_of: Mapping[int, int],
    weights: TravelWeights,
    *,
    threshold: int = DEFAULT_BRUTE_FORCE_THRESHOLD,
    day_start_hours: float | None = None,
    deadline: float | None = None,
) -> SolverResult:
    """Find the cheapest order of the spots in ``activities``.

    ``activities`` is the day's baseline sequence (spots and other activities
    sorted by their current order). Days with more than ``threshold``
    activities are returned unchanged: there is no heuristic for larger days.
    """
    baseline = list(activities)
    spots = [activity for activity in baseline if activity.is_spot]
    cost = _cost_function(baseline, index_of, weights, day_start_hours)
    baseline_score = cost(spots)

    if len(baseline) > threshold:
        logger.warning(
            f"{len(baseline)} activities exceed the exhaustive search threshold of {threshold}, keeping current order"
        )
        return SolverResult(baseline, baseline_score, baseline_score, evaluated=1, exhaustive=False)

    best: Sequence[ActivityNode] = spots
    best_score = baseline_score
    evaluated = 1
    # The first permutation is the baseline, already scored.
    for candidate in islice(heap_permutations(spots), 1, None):
        if deadline is not None and time.monotonic() > deadline:
            raise SuggestionTimeout(f"Order search stopped after {evaluated} permutations: deadline passed.")
        score = cost(candidate)
        evaluated += 1
        if score < best_score:
            best_score = score
            best = candidate

    return SolverResult(
        sequence=merge_spots(baseline, best),
        score=best_score,
        baseline_score=baseline_score,
        evaluated=evaluated,
        exhaustive=True,
    )
