import pytest

from clubfinder.errors import BudgetExceededError
from clubfinder.http import RequestBudget, RequestMetrics
from clubfinder.models import ProviderResult, RouteLeg
from clubfinder.pipeline import run


class CountingRoutesClient:
    def __init__(self):
        self.calls = 0

    def route(self, origin_lng_lat, dest_lng_lat):
        self.calls += 1
        return ProviderResult.success(RouteLeg(distance_meters=5000.0, duration_seconds=600.0))


class RepeatingPlacesClient:
    def __init__(self, hits):
        self.hits = hits

    def text_search(self, query, center, radius_m, type_filter=None):
        return ProviderResult.success(list(self.hits))


def test_budget_counts_and_caps():
    metrics = RequestMetrics()
    budget = RequestBudget(max_places=2, max_routes=1, metrics=metrics)

    budget.consume("places")
    budget.consume("places")
    budget.consume("routes")
    budget.consume("isochrones")
    with pytest.raises(BudgetExceededError):
        budget.consume("places")
    with pytest.raises(BudgetExceededError):
        budget.consume("routes")

    assert metrics.to_dict() == {
        "network_places": 2,
        "network_routes": 1,
        "network_isochrones": 1,
        "dedup_skips_routes": 0,
    }


def test_unknown_kind_is_rejected():
    with pytest.raises(ValueError):
        RequestBudget(max_places=1, max_routes=1).consume("geocode")


def test_route_memo_skips_repeat_lookups():
    hits = [
        {"id": "a", "displayName": {"text": "Valley Volleyball Club"}, "location": {"latitude": 33.46, "longitude": -112.05}},
        {"id": "b", "displayName": {"text": "Mesa Juniors"}, "location": {"latitude": 33.47, "longitude": -112.04}},
    ]
    routes = CountingRoutesClient()
    metrics = RequestMetrics()

    response = run(
        {"origin": {"lat": 33.45, "lng": -112.07}, "sports": ["volleyball"], "driveTimeMinutes": 20},
        places_client=RepeatingPlacesClient(hits),
        routes_client=routes,
        metrics=metrics,
    )

    assert [e.id for e in response.entities] == ["a", "b"]
    assert routes.calls == 2
    # 8 keywords x 2 hits, only the first sighting of each id is routed
    assert metrics.dedup_skips_routes == 14
