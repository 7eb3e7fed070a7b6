"""Domain models for day activities and travel data."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

SECONDS_PER_HOUR = 3600.0


class TravelMode(str, Enum):
    WALK = "WALK"
    DRIVE = "DRIVE"
    TRANSIT = "TRANSIT"
    BICYCLE = "BICYCLE"


class ActivityKind(str, Enum):
    SPOT = "Spot"
    OTHER = "Other"


@dataclass(slots=True, frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(slots=True)
class ActivityNode:
    """One activity of a day.

    Spots carry a coordinate and take part in travel-time optimisation. Other
    activities have no location; they keep their place in the day.
    """

    activity_id: int
    kind: ActivityKind
    order: int
    coordinate: Optional[Coordinate] = None
    duration_hours: float = 0.0
    start_time: Optional[float] = None

    def __post_init__(self) -> None:
        if self.kind is ActivityKind.SPOT and self.coordinate is None:
            raise ValueError(f"Spot {self.activity_id} requires a coordinate.")
        if self.kind is ActivityKind.OTHER and self.coordinate is not None:
            raise ValueError(f"Activity {self.activity_id} is not a spot and cannot carry a coordinate.")

    @classmethod
    def spot(
        cls,
        activity_id: int,
        order: int,
        latitude: float,
        longitude: float,
        *,
        duration_hours: float = 0.0,
        start_time: Optional[float] = None,
    ) -> "ActivityNode":
        return cls(
            activity_id=activity_id,
            kind=ActivityKind.SPOT,
            order=order,
            coordinate=Coordinate(latitude, longitude),
            duration_hours=duration_hours,
            start_time=start_time,
        )

    @classmethod
    def other(
        cls,
        activity_id: int,
        order: int,
        *,
        duration_hours: float = 0.0,
        start_time: Optional[float] = None,
    ) -> "ActivityNode":
        return cls(
            activity_id=activity_id,
            kind=ActivityKind.OTHER,
            order=order,
            duration_hours=duration_hours,
            start_time=start_time,
        )

    @property
    def is_spot(self) -> bool:
        return self.kind is ActivityKind.SPOT


@dataclass(slots=True, frozen=True)
class TransportOverride:
    """Manually entered travel time for one directed pair of activities."""

    from_activity_id: int
    to_activity_id: int
    duration_hours: float

    @property
    def duration_seconds(self) -> float:
        return self.duration_hours * SECONDS_PER_HOUR


@dataclass(slots=True, frozen=True)
class ActivityOrder:
    activity_id: int
    order: int
