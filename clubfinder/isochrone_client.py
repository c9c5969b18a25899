"""Reachability polygon adapter (Mapbox Isochrone API)."""
from __future__ import annotations

import logging
from typing import Any, Dict

from . import config
from .errors import ProviderRequestError
from .geo import select_polygon
from .http import HttpClient, RequestBudget
from .models import LatLng, ProviderResult

logger = logging.getLogger(__name__)


class IsochroneClient:
    def __init__(
        self,
        http_client: HttpClient,
        access_token: str,
        budget: RequestBudget,
    ) -> None:
        self.http = http_client
        self.access_token = access_token
        self.budget = budget

    def generate(self, center: LatLng, minutes: float) -> ProviderResult[Dict[str, Any]]:
        """Drive-time polygon around center, coordinates in [lng, lat] order."""
        url = f"{config.MAPBOX_ISOCHRONE_URL}/{center.lng},{center.lat}"
        params = {
            "contours_minutes": int(round(minutes)),
            "polygons": "true",
            "access_token": self.access_token,
        }
        context = {"lat": center.lat, "lng": center.lng, "minutes": minutes}
        try:
            self.budget.consume("isochrones")
            response = self.http.get_json("isochrone", url, params=params)
        except ProviderRequestError as exc:
            exc.context.update(context)
            return ProviderResult.failure(exc)

        polygon = select_polygon(response)
        if polygon is None:
            return ProviderResult.failure(
                ProviderRequestError("isochrone", "no polygon in response", context=context)
            )
        logger.info("Isochrone polygon: %d coordinates", len(polygon["coordinates"][0]))
        return ProviderResult.success(polygon)
