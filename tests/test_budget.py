from clubfinder import config
from clubfinder.errors import BudgetExceededError
from clubfinder.http import HttpClient, RequestBudget, RequestMetrics
from clubfinder.models import ProviderResult
from clubfinder.pipeline import run
from clubfinder.places_client import PlacesClient


class FakeResponse:
    status_code = 200
    headers = {}

    def json(self):
        return {"places": []}


class FakeSession:
    def __init__(self):
        self.calls = 0

    def post(self, url, data=None, headers=None, timeout=None):
        self.calls += 1
        return FakeResponse()


class NoRoutesClient:
    def route(self, origin_lng_lat, dest_lng_lat):
        raise AssertionError("no hits, nothing to route")


def test_budget_guard_stops_requests_without_aborting_run(monkeypatch):
    monkeypatch.setattr(config, "SPORT_KEYWORDS", {"volleyball": ["q1", "q2", "q3"]})
    session = FakeSession()
    http_client = HttpClient(timeout=1)
    http_client.session = session
    metrics = RequestMetrics()
    budget = RequestBudget(max_places=1, max_routes=0, metrics=metrics)
    places = PlacesClient(http_client, "dummy", budget)

    response = run(
        {"origin": {"lat": 33.45, "lng": -112.07}, "sports": ["volleyball"], "driveTimeMinutes": 20},
        places_client=places,
        routes_client=NoRoutesClient(),
        metrics=metrics,
    )

    assert session.calls == 1
    assert metrics.network_places == 1
    # q2, q3 and the fallback all hit the cap
    assert response.diagnostics.search_failures == 3
    assert response.diagnostics.used_fallback is True
    assert response.entities == []


def test_budget_error_is_a_provider_failure():
    result = ProviderResult.failure(BudgetExceededError("places", "cap"))
    assert not result.ok
    assert "places: cap" in str(result.error)
