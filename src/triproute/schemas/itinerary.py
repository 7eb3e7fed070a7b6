"""Activity order suggestion request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import ActivityNode, TransportOverride, TravelMode


class SpotModel(BaseModel):
    id: int
    order: int
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    duration_hours: float = Field(default=0.0, ge=0)
    start_time: Optional[float] = Field(default=None, ge=0, lt=24, description="Fixed start time in hours; 0 means not set.")

    def to_node(self) -> ActivityNode:
        return ActivityNode.spot(
            self.id,
            self.order,
            self.latitude,
            self.longitude,
            duration_hours=self.duration_hours,
            start_time=self.start_time,
        )


class OtherActivityModel(BaseModel):
    id: int
    order: int
    duration_hours: float = Field(default=0.0, ge=0)
    start_time: Optional[float] = Field(default=None, ge=0, lt=24, description="Fixed start time in hours; 0 means not set.")

    def to_node(self) -> ActivityNode:
        return ActivityNode.other(
            self.id,
            self.order,
            duration_hours=self.duration_hours,
            start_time=self.start_time,
        )


class TransportModel(BaseModel):
    from_activity_id: int
    to_activity_id: int
    duration_hours: float = Field(..., ge=0)

    def to_override(self) -> TransportOverride:
        return TransportOverride(self.from_activity_id, self.to_activity_id, self.duration_hours)


class SuggestOrderRequest(BaseModel):
    spots: List[SpotModel]
    other_activities: List[OtherActivityModel] = Field(default_factory=list)
    start: Optional[SpotModel] = Field(default=None, description="Fixed first stop of the day.")
    end: Optional[SpotModel] = Field(default=None, description="Fixed last stop of the day.")
    transports: List[TransportModel] = Field(
        default_factory=list,
        description="Manually entered travel times; they replace queried durations.",
    )
    travel_mode: Optional[TravelMode] = None
    day_start_hours: Optional[float] = Field(default=None, ge=0, lt=24)


class ActivityOrderModel(BaseModel):
    activity_id: int
    order: int


class SuggestOrderResponse(BaseModel):
    orders: List[ActivityOrderModel]
    metadata: dict
