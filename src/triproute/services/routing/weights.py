"""Travel weight assembly for one optimisation run."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from ...models.domain import ActivityNode, Coordinate, TransportOverride, TravelMode
from .matrix_client import DistanceMatrixProvider

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TravelWeights:
    """Durations in seconds; ``inf`` marks a pair with no known route."""

    matrix: list[list[float]]
    start: list[float]
    end: list[float]

    @property
    def size(self) -> int:
        return len(self.matrix)


def _coordinate_of(node: ActivityNode) -> Coordinate:
    if not node.is_spot or node.coordinate is None:
        raise ValueError(f"Activity {node.activity_id} has no coordinate and cannot be routed.")
    return node.coordinate


def build_travel_weights(
    spots: Sequence[ActivityNode],
    index_of: Mapping[int, int],
    provider: DistanceMatrixProvider,
    travel_mode: TravelMode,
    *,
    start: ActivityNode | None = None,
    end: ActivityNode | None = None,
    transports: Iterable[TransportOverride] = (),
    deadline: float | None = None,
) -> TravelWeights:
    """Query spot-to-spot and anchor durations, then overlay manual transports.

    ``index_of`` maps each spot's activity id to its row/column in the matrix.
    Provider calls are made one after another so a run never has more than one
    request in flight.
    """
    n = len(spots)
    coordinates = [_coordinate_of(spot) for spot in spots]
    matrix = [[math.inf] * n for _ in range(n)]
    start_weights = [0.0] * n
    end_weights = [0.0] * n

    if n:
        for element in provider.compute(coordinates, coordinates, travel_mode, deadline=deadline):
            if element.duration_seconds is not None:
                matrix[element.origin_index][element.destination_index] = float(element.duration_seconds)

        if start is not None:
            start_weights = [math.inf] * n
            for element in provider.compute([_coordinate_of(start)], coordinates, travel_mode, deadline=deadline):
                if element.duration_seconds is not None:
                    start_weights[element.destination_index] = float(element.duration_seconds)

        if end is not None:
            end_weights = [math.inf] * n
            for element in provider.compute(coordinates, [_coordinate_of(end)], travel_mode, deadline=deadline):
                if element.duration_seconds is not None:
                    end_weights[element.origin_index] = float(element.duration_seconds)

    for transport in transports:
        origin = index_of.get(transport.from_activity_id)
        destination = index_of.get(transport.to_activity_id)
        applied = False
        if origin is not None and destination is not None:
            matrix[origin][destination] = transport.duration_seconds
            applied = True
        if start is not None and transport.from_activity_id == start.activity_id and destination is not None:
            start_weights[destination] = transport.duration_seconds
            applied = True
        if end is not None and transport.to_activity_id == end.activity_id and origin is not None:
            end_weights[origin] = transport.duration_seconds
            applied = True
        if not applied:
            logger.debug(
                f"Transport {transport.from_activity_id}->{transport.to_activity_id} "
                "does not connect activities in this run, ignoring"
            )

    return TravelWeights(matrix=matrix, start=start_weights, end=end_weights)
