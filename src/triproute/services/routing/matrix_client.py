"""Travel-duration matrix lookups against the Google Routes API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

import httpx

from ...config import settings
from ...models.domain import Coordinate, TravelMode
from .errors import DurationParseError, ExternalServiceError, MatrixValidationError
from .throttled_client import ThrottledClient

# computeRouteMatrix batch ceiling used by this service (origins x destinations).
DEFAULT_MAX_ELEMENTS_PER_REQUEST = 49
FIELD_MASK = "originIndex,destinationIndex,duration,condition"

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class MatrixElement:
    origin_index: int
    destination_index: int
    duration_seconds: Optional[int]


class DistanceMatrixProvider(Protocol):
    def compute(
        self,
        origins: Sequence[Coordinate],
        destinations: Sequence[Coordinate],
        travel_mode: TravelMode,
        *,
        deadline: float | None = None,
    ) -> list[MatrixElement]:
        ...


def _waypoint(coordinate: Coordinate) -> dict:
    return {
        "waypoint": {
            "location": {
                "latLng": {"latitude": coordinate.latitude, "longitude": coordinate.longitude}
            }
        }
    }


class RoutesMatrixClient:
    def __init__(
        self,
        client: ThrottledClient,
        *,
        api_key: str | None = None,
        url: str | None = None,
        max_elements: int | None = None,
        reject_unparsable_durations: bool | None = None,
    ) -> None:
        self.client = client
        self.api_key = api_key if api_key is not None else settings.routes_api_key
        self.url = url or settings.routes_api_url
        self.max_elements = max_elements if max_elements is not None else settings.routes_max_elements_per_request
        self.reject_unparsable_durations = (
            reject_unparsable_durations
            if reject_unparsable_durations is not None
            else settings.reject_unparsable_durations
        )

    def compute(
        self,
        origins: Sequence[Coordinate],
        destinations: Sequence[Coordinate],
        travel_mode: TravelMode,
        *,
        deadline: float | None = None,
    ) -> list[MatrixElement]:
        """Return travel durations for every origin/destination pair in one request."""
        element_count = len(origins) * len(destinations)
        if element_count > self.max_elements:
            raise MatrixValidationError(
                f"Route matrix of {len(origins)}x{len(destinations)} elements exceeds "
                f"the limit of {self.max_elements} per request."
            )
        if element_count == 0:
            return []

        payload = {
            "origins": [_waypoint(c) for c in origins],
            "destinations": [_waypoint(c) for c in destinations],
            "travelMode": TravelMode(travel_mode).value,
        }
        headers = {"X-Goog-FieldMask": FIELD_MASK}
        if self.api_key:
            headers["X-Goog-Api-Key"] = self.api_key

        logger.debug(f"Requesting {len(origins)}x{len(destinations)} route matrix ({payload['travelMode']})")
        try:
            response = self.client.post(self.url, json=payload, headers=headers, deadline=deadline)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise ExternalServiceError(
                f"Route matrix request failed with HTTP {exc.response.status_code}: {exc.response.text[:200]}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ExternalServiceError(f"Failed to reach route matrix service at {self.url}: {exc}") from exc
        except ValueError as exc:
            raise ExternalServiceError("Route matrix response is not valid JSON.") from exc

        if not isinstance(data, list):
            raise ExternalServiceError("Route matrix response is not a list of elements.")

        return [self._parse_element(element) for element in data]

    def _parse_element(self, element: dict) -> MatrixElement:
        # Zero-valued indices are omitted from the JSON encoding.
        origin_index = int(element.get("originIndex", 0))
        destination_index = int(element.get("destinationIndex", 0))
        if element.get("condition") == "ROUTE_NOT_FOUND" or "duration" not in element:
            return MatrixElement(origin_index, destination_index, None)
        return MatrixElement(origin_index, destination_index, self._parse_duration(element["duration"]))

    def _parse_duration(self, raw: object) -> int:
        text = str(raw).strip()
        if text.endswith("s"):
            text = text[:-1]
        try:
            return int(text)
        except ValueError:
            if self.reject_unparsable_durations:
                raise DurationParseError(f"Unreadable duration {raw!r} in route matrix response.") from None
            logger.warning(f"Unreadable duration {raw!r} in route matrix response, using 0 seconds")
            return 0
