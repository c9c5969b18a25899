"""Places API text-search adapter and hit conversion."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from . import config
from .errors import ConversionError, ProviderRequestError
from .http import HttpClient, RequestBudget
from .models import Entity, LatLng, ProviderResult

logger = logging.getLogger(__name__)


class PlacesClient:
    def __init__(
        self,
        http_client: HttpClient,
        api_key: str,
        budget: RequestBudget,
        field_mask: str = config.PLACES_FIELD_MASK,
    ) -> None:
        self.http = http_client
        self.api_key = api_key
        self.budget = budget
        self.field_mask = field_mask

    def text_search(
        self,
        query: str,
        center: LatLng,
        radius_m: int,
        type_filter: Optional[Sequence[str]] = None,
    ) -> ProviderResult[List[Dict[str, Any]]]:
        types = [t for t in (type_filter or []) if t]
        included_type = types[0] if len(types) == 1 else None
        body = build_text_search_body(query, center, radius_m, included_type)
        headers = {
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": self.field_mask,
        }
        try:
            self.budget.consume("places")
            response = self.http.post_json("places", config.PLACES_TEXT_SEARCH_URL, body, headers)
        except ProviderRequestError as exc:
            exc.context.update({"query": query, "lat": center.lat, "lng": center.lng})
            return ProviderResult.failure(exc)

        hits = parse_places_response(response)
        if len(types) > 1:
            hits = filter_hits_by_types(hits, types)
        logger.debug("Places %r: %d hits", query, len(hits))
        return ProviderResult.success(hits)


def build_text_search_body(
    query: str,
    center: LatLng,
    radius_m: int,
    included_type: Optional[str] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "textQuery": query,
        "languageCode": config.PLACES_LANGUAGE_CODE,
        "maxResultCount": config.PLACES_MAX_RESULT_COUNT,
        "locationBias": {
            "circle": {
                "center": {"latitude": center.lat, "longitude": center.lng},
                "radius": float(radius_m),
            }
        },
        "rankPreference": config.PLACES_RANK_PREFERENCE,
    }
    if included_type:
        body["includedType"] = included_type
    if config.PLACES_TEXT_SEARCH_BODY_EXTRA:
        body.update(config.PLACES_TEXT_SEARCH_BODY_EXTRA)
    return body


def parse_places_response(response: Dict[str, Any]) -> List[Dict[str, Any]]:
    places = response.get("places") if isinstance(response, dict) else None
    if not isinstance(places, list):
        return []
    return [p for p in places if isinstance(p, dict)]


def normalize_type(value: str) -> str:
    return str(value).strip().lower().replace(" ", "_").replace("-", "_")


def filter_hits_by_types(hits: List[Dict[str, Any]], types: Sequence[str]) -> List[Dict[str, Any]]:
    wanted = {normalize_type(t) for t in types}
    kept = []
    for hit in hits:
        hit_types = {normalize_type(t) for t in hit.get("types") or []}
        if hit_types & wanted:
            kept.append(hit)
    return kept


# Adapter/mapper for Places response fields

def convert_place(hit: Dict[str, Any], sport: str) -> Entity:
    """Build an Entity from a raw hit; raises ConversionError when unusable."""
    place_id = hit.get("id") or hit.get("place_id") or hit.get("placeId")
    if not place_id:
        raise ConversionError("No identifier in place result")

    display = hit.get("displayName")
    if isinstance(display, dict):
        name = display.get("text")
    else:
        name = display
    name = hit.get("name") or name
    if not name or not str(name).strip():
        raise ConversionError(f"No name in place result {place_id}")

    location = hit.get("location")
    if isinstance(location, dict):
        lat = location.get("latitude", location.get("lat"))
        lng = location.get("longitude", location.get("lng"))
    elif isinstance(hit.get("geometry"), dict) and isinstance(hit["geometry"].get("location"), dict):
        lat = hit["geometry"]["location"].get("lat")
        lng = hit["geometry"]["location"].get("lng")
    else:
        raise ConversionError(f"No location data in place result {place_id}")
    try:
        point = LatLng(lat, lng)
    except ValueError as exc:
        raise ConversionError(f"{exc} ({place_id})") from exc

    review_count = _optional_int(hit.get("userRatingCount", hit.get("user_ratings_total")))
    return Entity(
        id=str(place_id),
        name=str(name).strip(),
        location=point,
        address=hit.get("formattedAddress") or hit.get("formatted_address") or "",
        phone=hit.get("nationalPhoneNumber") or hit.get("formatted_phone_number"),
        website=_optional_str(hit.get("websiteUri") or hit.get("website")),
        place_types=[normalize_type(t) for t in hit.get("types") or []],
        rating=hit.get("rating"),
        review_count=review_count,
        sport=sport,
    )


def _optional_int(value: Any) -> Optional[int]:
    # Counts are informational; a malformed one is dropped, not fatal.
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


def _optional_str(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()
