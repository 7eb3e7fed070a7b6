"""Activity order suggestion for a single day."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Sequence

from ...config import Settings, settings
from ...models.domain import ActivityNode, ActivityOrder, TransportOverride, TravelMode
from .matrix_client import DistanceMatrixProvider, RoutesMatrixClient
from .rate_limiter import SlidingWindowRateLimiter
from .sequence_solver import solve_order
from .throttled_client import ThrottledClient
from .weights import build_travel_weights

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SuggestionResult:
    orders: list[ActivityOrder]
    metadata: dict = field(default_factory=dict)


def build_routes_rate_limiter(config: Settings | None = None) -> SlidingWindowRateLimiter:
    config = config or settings
    return SlidingWindowRateLimiter(
        config.routes_max_requests_per_window,
        config.routes_window_seconds,
        name="google-routes",
    )


def build_routes_provider(
    limiter: SlidingWindowRateLimiter,
    config: Settings | None = None,
) -> RoutesMatrixClient:
    config = config or settings
    client = ThrottledClient(limiter, timeout=config.routes_timeout_seconds)
    return RoutesMatrixClient(
        client,
        api_key=config.routes_api_key,
        url=config.routes_api_url,
        max_elements=config.routes_max_elements_per_request,
        reject_unparsable_durations=config.reject_unparsable_durations,
    )


def _finite_or_none(seconds: float) -> float | None:
    # Unreachable legs score as inf, which JSON cannot carry.
    return seconds if math.isfinite(seconds) else None


def _to_orders(
    sequence: Sequence[ActivityNode],
    start: ActivityNode | None,
    end: ActivityNode | None,
) -> list[ActivityOrder]:
    ordered = [*([start] if start is not None else []), *sequence, *([end] if end is not None else [])]
    return [
        ActivityOrder(activity_id=activity.activity_id, order=position)
        for position, activity in enumerate(ordered, start=1)
    ]


def suggest_activity_order(
    spots: Sequence[ActivityNode],
    other_activities: Sequence[ActivityNode],
    *,
    provider: DistanceMatrixProvider,
    start: ActivityNode | None = None,
    end: ActivityNode | None = None,
    transports: Sequence[TransportOverride] = (),
    travel_mode: TravelMode = TravelMode.DRIVE,
    day_start_hours: float | None = None,
    timeout_seconds: float | None = None,
    threshold: int | None = None,
) -> SuggestionResult:
    """Suggest a visiting order for a day's activities that minimises travel time.

    Args:
        spots: Activities with coordinates; the only ones that get reordered.
        other_activities: Activities without a location; they keep their position.
        provider: Source of travel durations between coordinates.
        start: Optional fixed first stop, never reordered.
        end: Optional fixed last stop, never reordered.
        transports: Manual travel times that replace queried durations.
        travel_mode: Mode passed to the routing service.
        day_start_hours: Clock time the day starts, used with fixed start times.
        timeout_seconds: Deadline for the whole run (settings default when None).
        threshold: Largest day searched exhaustively (settings default when None).

    Returns:
        SuggestionResult with orders numbered from 1. Any failure raises and no
        partial ordering is returned.
    """
    threshold = threshold if threshold is not None else settings.brute_force_threshold
    timeout_seconds = timeout_seconds if timeout_seconds is not None else settings.suggestion_timeout_seconds
    deadline = time.monotonic() + timeout_seconds if timeout_seconds else None

    anchor_ids = {anchor.activity_id for anchor in (start, end) if anchor is not None}
    spots = [spot for spot in spots if spot.activity_id not in anchor_ids]
    other_activities = [activity for activity in other_activities if activity.activity_id not in anchor_ids]

    index_of = {spot.activity_id: index for index, spot in enumerate(spots)}
    baseline = sorted([*spots, *other_activities], key=lambda activity: activity.order)

    metadata: dict = {
        "spots": len(spots),
        "activities": len(baseline),
        "travel_mode": TravelMode(travel_mode).value,
    }

    if len(spots) < 2 or len(baseline) > threshold:
        strategy = "too_few_spots" if len(spots) < 2 else "unchanged_over_threshold"
        if strategy == "unchanged_over_threshold":
            logger.warning(
                f"Day has {len(baseline)} activities, above the search threshold of {threshold}; "
                "keeping the current order"
            )
        metadata["strategy"] = strategy
        return SuggestionResult(orders=_to_orders(baseline, start, end), metadata=metadata)

    started = time.perf_counter()
    weights = build_travel_weights(
        spots,
        index_of,
        provider,
        travel_mode,
        start=start,
        end=end,
        transports=transports,
        deadline=deadline,
    )
    result = solve_order(
        baseline,
        index_of,
        weights,
        threshold=threshold,
        day_start_hours=day_start_hours,
        deadline=deadline,
    )
    elapsed = time.perf_counter() - started
    logger.info(
        f"Suggested order for {len(spots)} spots in {elapsed:.2f}s: "
        f"score {result.score:.0f}s (was {result.baseline_score:.0f}s, {result.evaluated} permutations)"
    )

    metadata.update(
        strategy="exhaustive",
        score_seconds=_finite_or_none(result.score),
        baseline_score_seconds=_finite_or_none(result.baseline_score),
        permutations_evaluated=result.evaluated,
    )
    return SuggestionResult(orders=_to_orders(result.sequence, start, end), metadata=metadata)
