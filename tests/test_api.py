import pytest
from fastapi.testclient import TestClient

from triproute.api.routes import itinerary as itinerary_routes
from triproute.main import create_app
from triproute.services.routing.errors import ExternalServiceError, MatrixValidationError
from triproute.services.routing.matrix_client import MatrixElement


class DummyProvider:
    def __init__(self, duration_seconds: int = 600):
        self.duration_seconds = duration_seconds
        self.travel_modes = []

    def compute(self, origins, destinations, travel_mode, *, deadline=None):
        self.travel_modes.append(travel_mode)
        return [
            MatrixElement(i, j, 0 if origin == destination else self.duration_seconds)
            for i, origin in enumerate(origins)
            for j, destination in enumerate(destinations)
        ]


class RaisingProvider:
    def __init__(self, error: Exception):
        self.error = error

    def compute(self, origins, destinations, travel_mode, *, deadline=None):
        raise self.error


@pytest.fixture
def api_client() -> TestClient:
    return TestClient(create_app())


def _use_provider(monkeypatch: pytest.MonkeyPatch, provider) -> None:
    monkeypatch.setattr(itinerary_routes, "build_routes_provider", lambda limiter: provider)


def _payload(**overrides) -> dict:
    payload = {
        "spots": [
            {"id": 1, "order": 1, "latitude": 50.061, "longitude": 19.937},
            {"id": 2, "order": 3, "latitude": 50.054, "longitude": 19.935},
        ],
        "other_activities": [{"id": 3, "order": 2, "duration_hours": 1.5}],
        "travel_mode": "WALK",
    }
    payload.update(overrides)
    return payload


def test_health(api_client: TestClient):
    response = api_client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_routes_health_reports_limiter(api_client: TestClient):
    response = api_client.get("/api/health/routes")

    assert response.status_code == 200
    body = response.json()
    assert body["service"] == "routes"
    assert body["available_slots"] == body["max_requests_per_window"]


def test_suggest_order(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    provider = DummyProvider()
    _use_provider(monkeypatch, provider)

    response = api_client.post("/api/itinerary/suggest-order", json=_payload())

    assert response.status_code == 200
    body = response.json()
    assert body["orders"] == [
        {"activity_id": 1, "order": 1},
        {"activity_id": 3, "order": 2},
        {"activity_id": 2, "order": 3},
    ]
    assert body["metadata"]["strategy"] == "exhaustive"
    assert body["metadata"]["travel_mode"] == "WALK"
    assert [mode.value for mode in provider.travel_modes] == ["WALK"]


def test_suggest_order_with_anchor_and_transport(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    _use_provider(monkeypatch, DummyProvider())
    payload = _payload(
        start={"id": 10, "order": 0, "latitude": 50.07, "longitude": 19.93},
        transports=[{"from_activity_id": 10, "to_activity_id": 2, "duration_hours": 0.05}],
    )

    response = api_client.post("/api/itinerary/suggest-order", json=payload)

    assert response.status_code == 200
    orders = response.json()["orders"]
    assert [o["activity_id"] for o in orders] == [10, 2, 3, 1]


def test_too_few_spots(api_client: TestClient):
    response = api_client.post("/api/itinerary/suggest-order", json=_payload(spots=[_payload()["spots"][0]]))

    assert response.status_code == 404


def test_routing_failure_maps_to_bad_gateway(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    _use_provider(monkeypatch, RaisingProvider(ExternalServiceError("HTTP 503")))

    response = api_client.post("/api/itinerary/suggest-order", json=_payload())

    assert response.status_code == 502


def test_matrix_validation_maps_to_bad_request(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    _use_provider(monkeypatch, RaisingProvider(MatrixValidationError("too many elements")))

    response = api_client.post("/api/itinerary/suggest-order", json=_payload())

    assert response.status_code == 400
    assert "too many elements" in response.json()["detail"]


def test_invalid_coordinates_rejected(api_client: TestClient):
    bad = _payload()
    bad["spots"][0]["latitude"] = 123.0

    response = api_client.post("/api/itinerary/suggest-order", json=bad)

    assert response.status_code == 422
