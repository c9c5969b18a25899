"""Driving directions adapter (Mapbox Directions API)."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from . import config
from .errors import ProviderRequestError
from .http import HttpClient, RequestBudget
from .models import ProviderResult, RouteLeg

logger = logging.getLogger(__name__)

# Provider answered, but there is no drivable route between the points.
_NO_ROUTE_CODES = {"NoRoute", "NoSegment"}


class RoutesClient:
    def __init__(
        self,
        http_client: HttpClient,
        access_token: str,
        budget: RequestBudget,
    ) -> None:
        self.http = http_client
        self.access_token = access_token
        self.budget = budget

    def route(
        self,
        origin_lng_lat: Tuple[float, float],
        dest_lng_lat: Tuple[float, float],
    ) -> ProviderResult[Optional[RouteLeg]]:
        """Best driving route between two [lng, lat] points.

        A success with value None means the provider found no route; a failure
        means the call itself did not succeed.
        """
        url = build_directions_url(origin_lng_lat, dest_lng_lat)
        params = {"overview": "false", "access_token": self.access_token}
        context = {"origin": _fmt(origin_lng_lat), "destination": _fmt(dest_lng_lat)}
        try:
            self.budget.consume("routes")
            response = self.http.get_json("routes", url, params=params)
        except ProviderRequestError as exc:
            exc.context.update(context)
            return ProviderResult.failure(exc)

        if not isinstance(response, dict):
            return ProviderResult.failure(
                ProviderRequestError("routes", "unexpected response body", context=context)
            )
        code = response.get("code")
        if code in _NO_ROUTE_CODES:
            return ProviderResult.success(None)
        if code not in (None, "Ok"):
            return ProviderResult.failure(
                ProviderRequestError(
                    "routes",
                    f"unexpected response code {code}",
                    context=context,
                )
            )
        return ProviderResult.success(parse_route(response))


def build_directions_url(origin_lng_lat: Tuple[float, float], dest_lng_lat: Tuple[float, float]) -> str:
    return f"{config.MAPBOX_DIRECTIONS_URL}/{_fmt(origin_lng_lat)};{_fmt(dest_lng_lat)}"


def parse_route(response: Dict[str, Any]) -> Optional[RouteLeg]:
    routes = response.get("routes")
    if not isinstance(routes, list) or not routes or not isinstance(routes[0], dict):
        return None
    first = routes[0]
    duration = first.get("duration")
    distance = first.get("distance")
    if duration is None or distance is None:
        return None
    try:
        return RouteLeg(distance_meters=float(distance), duration_seconds=float(duration))
    except (TypeError, ValueError):
        return None


def _fmt(lng_lat: Tuple[float, float]) -> str:
    return f"{lng_lat[0]},{lng_lat[1]}"
