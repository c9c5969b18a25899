"""HTTP client and per-run request budgeting."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import requests

from .errors import BudgetExceededError, ProviderRequestError

logger = logging.getLogger(__name__)


@dataclass
class RequestMetrics:
    network_places: int = 0
    network_routes: int = 0
    network_isochrones: int = 0
    dedup_skips_routes: int = 0

    def inc_network(self, kind: str) -> None:
        if kind == "places":
            self.network_places += 1
        elif kind == "routes":
            self.network_routes += 1
        elif kind == "isochrones":
            self.network_isochrones += 1
        else:
            raise ValueError(f"Unknown request kind: {kind}")

    def to_dict(self) -> Dict[str, int]:
        return {
            "network_places": self.network_places,
            "network_routes": self.network_routes,
            "network_isochrones": self.network_isochrones,
            "dedup_skips_routes": self.dedup_skips_routes,
        }


class RequestBudget:
    def __init__(
        self,
        max_places: int,
        max_routes: int,
        metrics: Optional[RequestMetrics] = None,
    ) -> None:
        self.max_places = max_places
        self.max_routes = max_routes
        self.metrics = metrics if metrics is not None else RequestMetrics()

    @property
    def places_count(self) -> int:
        return self.metrics.network_places

    @property
    def routes_count(self) -> int:
        return self.metrics.network_routes

    def consume(self, kind: str) -> None:
        if kind == "places":
            if self.places_count >= self.max_places:
                raise BudgetExceededError(
                    "places",
                    f"Places request budget exceeded: {self.places_count} >= {self.max_places}",
                )
        elif kind == "routes":
            if self.routes_count >= self.max_routes:
                raise BudgetExceededError(
                    "routes",
                    f"Routes request budget exceeded: {self.routes_count} >= {self.max_routes}",
                )
        elif kind != "isochrones":
            raise ValueError(f"Unknown budget kind: {kind}")
        self.metrics.inc_network(kind)


class HttpClient:
    """JSON over HTTP, one attempt per call.

    Any transport error, non-200 status or unparseable body becomes a
    ProviderRequestError for the caller to record.
    """

    def __init__(self, timeout: int = 20) -> None:
        self.timeout = timeout
        self.session = requests.Session()

    def post_json(
        self,
        provider: str,
        url: str,
        body: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        all_headers = {"Content-Type": "application/json"}
        if headers:
            all_headers.update(headers)
        payload = json.dumps(body)
        return self._request(
            provider,
            lambda: self.session.post(url, data=payload, headers=all_headers, timeout=self.timeout),
        )

    def get_json(
        self,
        provider: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        return self._request(
            provider,
            lambda: self.session.get(url, params=params, timeout=self.timeout),
        )

    def _request(self, provider: str, send: Callable[[], requests.Response]) -> Dict[str, Any]:
        try:
            resp = send()
        except requests.RequestException as exc:
            # The exception text can carry the request URL and its token.
            raise ProviderRequestError(provider, f"request failed: {exc.__class__.__name__}") from exc

        status = resp.status_code
        if status != 200:
            logger.error("HTTP %s from %s", status, provider)
            raise ProviderRequestError(provider, _error_message(resp), status=status)
        try:
            data = resp.json()
        except ValueError as exc:
            logger.error("Non-JSON response from %s", provider)
            raise ProviderRequestError(provider, "non-JSON response", status=status) from exc
        if not isinstance(data, dict):
            raise ProviderRequestError(provider, "unexpected response body", status=status)
        return data


def _error_message(resp: requests.Response) -> str:
    """Best-effort provider error text; never echoes request credentials."""
    try:
        data = resp.json()
    except ValueError:
        return (resp.text or "").strip()[:300] or f"HTTP {resp.status_code}"
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
        if data.get("message"):
            return str(data["message"])
    return f"HTTP {resp.status_code}"
