import httpx
import pytest

from triproute.models.domain import ActivityNode, ActivityOrder, TransportOverride, TravelMode
from triproute.services.routing import service as routing_service
from triproute.services.routing.errors import ExternalServiceError, RateLimitTimeout
from triproute.services.routing.matrix_client import MatrixElement, RoutesMatrixClient
from triproute.services.routing.rate_limiter import SlidingWindowRateLimiter
from triproute.services.routing.throttled_client import ThrottledClient

MINUTE = 60


class DummyProvider:
    """Symmetric durations keyed by activity id pairs, resolved through coordinates."""

    def __init__(self, nodes, pairs):
        self.by_coordinate = {node.coordinate: node.activity_id for node in nodes}
        self.pairs = {}
        for (a, b), seconds in pairs.items():
            self.pairs[(a, b)] = seconds
            self.pairs.setdefault((b, a), seconds)
        self.calls = 0

    def compute(self, origins, destinations, travel_mode, *, deadline=None):
        self.calls += 1
        elements = []
        for i, origin in enumerate(origins):
            for j, destination in enumerate(destinations):
                a, b = self.by_coordinate[origin], self.by_coordinate[destination]
                seconds = 0 if a == b else self.pairs.get((a, b))
                elements.append(MatrixElement(i, j, seconds))
        return elements


class FailingProvider:
    def compute(self, origins, destinations, travel_mode, *, deadline=None):
        raise ExternalServiceError("routing backend is down")


@pytest.fixture
def abc():
    return (
        ActivityNode.spot(1, 1, 50.061, 19.937),
        ActivityNode.spot(2, 2, 50.054, 19.935),
        ActivityNode.spot(3, 3, 50.049, 19.944),
    )


@pytest.fixture
def abc_pairs():
    return {(1, 2): 10 * MINUTE, (2, 3): 15 * MINUTE, (1, 3): 30 * MINUTE}


def _ids(result):
    return [order.activity_id for order in sorted(result.orders, key=lambda o: o.order)]


def test_three_spots_without_anchors(abc, abc_pairs):
    a, b, c = abc
    provider = DummyProvider(abc, abc_pairs)

    result = routing_service.suggest_activity_order([b, a, c], [], provider=provider)

    assert _ids(result) in ([1, 2, 3], [3, 2, 1])
    assert result.metadata["score_seconds"] == 25 * MINUTE
    assert provider.calls == 1


def test_three_spots_with_start_anchor(abc, abc_pairs):
    start = ActivityNode.spot(9, 0, 50.070, 19.930)
    pairs = {**abc_pairs, (9, 1): 5 * MINUTE, (9, 2): 20 * MINUTE, (9, 3): 25 * MINUTE}
    provider = DummyProvider([*abc, start], pairs)
    a, b, c = abc

    result = routing_service.suggest_activity_order([b, a, c], [], provider=provider, start=start)

    assert result.orders == [
        ActivityOrder(9, 1),
        ActivityOrder(1, 2),
        ActivityOrder(2, 3),
        ActivityOrder(3, 4),
    ]
    assert result.metadata["score_seconds"] == 30 * MINUTE
    assert provider.calls == 2


def test_end_anchor_is_appended_last(abc, abc_pairs):
    end = ActivityNode.spot(8, 99, 50.040, 19.950)
    pairs = {**abc_pairs, (1, 8): 40 * MINUTE, (2, 8): 40 * MINUTE, (3, 8): 2 * MINUTE}
    provider = DummyProvider([*abc, end], pairs)

    result = routing_service.suggest_activity_order(list(abc), [], provider=provider, end=end)

    assert _ids(result) == [1, 2, 3, 8]
    assert result.orders[-1] == ActivityOrder(8, 4)


def test_override_changes_the_suggestion(abc, abc_pairs):
    provider = DummyProvider(abc, abc_pairs)
    # A manual 1 minute transfer from C to A makes C -> A -> B the cheapest tour.
    transports = [TransportOverride(3, 1, 1 / 60)]

    result = routing_service.suggest_activity_order(list(abc), [], provider=provider, transports=transports)

    assert _ids(result) == [3, 1, 2]
    assert result.metadata["score_seconds"] == pytest.approx(11 * MINUTE)


def test_other_activities_keep_their_slot(abc, abc_pairs):
    a, b, c = abc
    lunch = ActivityNode.other(50, 2)
    provider = DummyProvider(abc, abc_pairs)

    result = routing_service.suggest_activity_order([a, c, b], [lunch], provider=provider)

    # Baseline is A, B, lunch, C: spots come before others with the same order.
    ids = _ids(result)
    assert ids[2] == 50
    assert [i for i in ids if i != 50] in ([1, 2, 3], [3, 2, 1])


def test_large_day_keeps_input_order_without_routing_calls():
    spots = [ActivityNode.spot(i, i, 50.0 + i * 0.01, 19.0) for i in range(1, 9)]
    provider = DummyProvider(spots, {})

    result = routing_service.suggest_activity_order(list(reversed(spots)), [], provider=provider)

    assert _ids(result) == list(range(1, 9))
    assert [o.order for o in result.orders] == list(range(1, 9))
    assert result.metadata["strategy"] == "unchanged_over_threshold"
    assert provider.calls == 0


def test_other_activities_count_toward_threshold(abc, abc_pairs):
    others = [ActivityNode.other(100 + i, 10 + i) for i in range(5)]
    provider = DummyProvider(abc, abc_pairs)

    result = routing_service.suggest_activity_order(list(abc), others, provider=provider)

    assert result.metadata["strategy"] == "unchanged_over_threshold"
    assert provider.calls == 0


def test_single_spot_needs_no_routing():
    spot = ActivityNode.spot(1, 1, 50.0, 19.0)
    provider = DummyProvider([spot], {})

    result = routing_service.suggest_activity_order([spot], [ActivityNode.other(2, 0)], provider=provider)

    assert result.orders == [ActivityOrder(2, 1), ActivityOrder(1, 2)]
    assert provider.calls == 0


def test_anchor_listed_among_spots_is_not_permuted(abc, abc_pairs):
    a, b, c = abc
    provider = DummyProvider(abc, abc_pairs)

    result = routing_service.suggest_activity_order([a, b, c], [], provider=provider, start=c)

    assert _ids(result)[0] == 3
    assert sorted(_ids(result)) == [1, 2, 3]
    assert len(result.orders) == 3


def test_provider_failure_aborts_without_result(abc):
    with pytest.raises(ExternalServiceError):
        routing_service.suggest_activity_order(list(abc), [], provider=FailingProvider())


def test_rate_limiter_wait_respects_timeout(abc):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[])

    limiter = SlidingWindowRateLimiter(1, 30.0)
    with limiter.slot():
        pass
    client = ThrottledClient(limiter, client=httpx.Client(transport=httpx.MockTransport(handler)))
    provider = RoutesMatrixClient(client, api_key="k", url="https://routes.example.test/matrix", max_elements=49)

    with pytest.raises(RateLimitTimeout):
        routing_service.suggest_activity_order(
            list(abc), [], provider=provider, travel_mode=TravelMode.WALK, timeout_seconds=0.2
        )


def test_build_routes_provider_uses_shared_limiter():
    limiter = routing_service.build_routes_rate_limiter()
    first = routing_service.build_routes_provider(limiter)
    second = routing_service.build_routes_provider(limiter)

    assert first.client.limiter is second.client.limiter is limiter
    assert first.max_elements == 49
