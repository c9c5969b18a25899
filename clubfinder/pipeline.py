"""Pipeline orchestration.

One call to run() is one request: expand keywords, search, convert, exclude,
score, contain, route, dedupe. Provider failures shrink the result and show
up in the diagnostics; only configuration and validation errors abort.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from shapely.geometry.base import BaseGeometry

from . import config, keywords, retail, scoring
from .aggregate import EntityArena, bypass_sample, finalize_diagnostics
from .errors import ConfigurationError, ConversionError, ValidationError
from .geo import build_polygon, contains_lng_lat, meters_to_miles, search_radius_meters, seconds_to_minutes
from .http import HttpClient, RequestBudget, RequestMetrics
from .models import (
    Diagnostics,
    Entity,
    EntityType,
    ProviderResult,
    RouteLeg,
    SearchRequest,
    SearchResponse,
)
from .places_client import PlacesClient, convert_place
from .routes_client import RoutesClient

logger = logging.getLogger(__name__)


@dataclass
class _SearchPass:
    query: str
    sport: str
    type_filter: Optional[List[str]] = None
    school_types: Optional[List[str]] = None


@dataclass
class _RunState:
    """Accumulators local to a single run."""

    request: SearchRequest
    radius_m: int
    polygon: Optional[BaseGeometry]
    metrics: RequestMetrics
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    accepted: EntityArena = field(default_factory=EntityArena)
    pre_filter: EntityArena = field(default_factory=EntityArena)
    route_memo: Dict[str, ProviderResult[Optional[RouteLeg]]] = field(default_factory=dict)


def run(
    request: Union[SearchRequest, Dict[str, Any]],
    places_client: Optional[PlacesClient] = None,
    routes_client: Optional[RoutesClient] = None,
    metrics: Optional[RequestMetrics] = None,
    max_places: Optional[int] = None,
    max_routes: Optional[int] = None,
) -> SearchResponse:
    if not isinstance(request, SearchRequest):
        request = SearchRequest.from_dict(request)

    polygon = None
    if request.isochrone_polygon is not None:
        try:
            polygon = build_polygon(request.isochrone_polygon)
        except (ValueError, TypeError, AttributeError) as exc:
            raise ValidationError(f"Invalid isochronePolygon: {exc}") from exc

    if metrics is None:
        metrics = RequestMetrics()

    if places_client is None or routes_client is None:
        places_client, routes_client = build_clients(
            places_client, routes_client, metrics=metrics, max_places=max_places, max_routes=max_routes
        )

    state = _RunState(
        request=request,
        radius_m=search_radius_meters(request.drive_time_minutes),
        polygon=polygon,
        metrics=metrics,
    )
    state.diagnostics.has_reachability_polygon = polygon is not None
    if polygon is not None:
        first = request.isochrone_polygon["coordinates"][0]
        logger.info("Isochrone polygon: %d coordinates, first=%s", len(first), first[0])

    logger.info(
        "Search: origin=[%s, %s], driveTime=%smin, radius=%sm, sports=[%s]",
        request.origin.lng,
        request.origin.lat,
        request.drive_time_minutes,
        state.radius_m,
        ", ".join(request.sports),
    )

    type_filter = list(config.PLACES_TYPE_FILTERS) if config.PLACES_RESTRICT_TYPES else None

    logger.info("Stage 1: keyword search")
    for sport in request.sports:
        for query in keywords.expand(sport):
            _run_pass(state, places_client, routes_client, _SearchPass(query, sport, type_filter))

    if request.school_types:
        logger.info("Stage 1b: school search (%s)", ", ".join(request.school_types))
        for query in keywords.expand_school_types(request.school_types):
            _run_pass(
                state,
                places_client,
                routes_client,
                _SearchPass(query, request.sports[0], None, list(request.school_types)),
            )

    if state.diagnostics.raw_found == 0:
        first_sport = request.sports[0]
        query = keywords.fallback_query(first_sport)
        logger.warning("Stage 2: no raw results, running one broad fallback search %r", query)
        state.diagnostics.used_fallback = True
        _run_pass(state, places_client, routes_client, _SearchPass(query, first_sport, None))

    logger.info("Stage 3: aggregate")
    entities = state.accepted.to_list()
    bypassed = False
    if not entities and len(state.pre_filter) > 0:
        bypassed = True
        entities = bypass_sample(state.pre_filter, config.BYPASS_SAMPLE_SIZE)
        logger.warning(
            "All %d places filtered out. Returning first %d for debugging.",
            len(state.pre_filter),
            len(entities),
        )

    diagnostics = finalize_diagnostics(state.diagnostics, entities, bypassed)
    logger.info(
        "Search pipeline: raw=%d, afterContainment=%d, afterRouting=%d, retailExcluded=%d, final=%d",
        diagnostics.raw_found,
        diagnostics.after_containment,
        diagnostics.after_routing,
        diagnostics.retail_excluded,
        diagnostics.unique_count,
    )
    return SearchResponse(entities=entities, diagnostics=diagnostics)


def handle_request(
    payload: Any,
    places_client: Optional[PlacesClient] = None,
    routes_client: Optional[RoutesClient] = None,
) -> Dict[str, Any]:
    """Wire-level entry: a response dict, or {"error": ...} on fatal errors."""
    try:
        response = run(payload, places_client=places_client, routes_client=routes_client)
    except (ConfigurationError, ValidationError) as exc:
        logger.error("Search rejected: %s", exc)
        return {"error": str(exc)}
    return response.to_dict()


def build_clients(
    places_client: Optional[PlacesClient] = None,
    routes_client: Optional[RoutesClient] = None,
    metrics: Optional[RequestMetrics] = None,
    max_places: Optional[int] = None,
    max_routes: Optional[int] = None,
) -> Tuple[PlacesClient, RoutesClient]:
    """Build whichever clients were not supplied; only their credentials are required."""
    budget = RequestBudget(
        max_places=config.MAX_PLACES_REQUESTS_PER_RUN if max_places is None else max_places,
        max_routes=config.MAX_ROUTES_REQUESTS_PER_RUN if max_routes is None else max_routes,
        metrics=metrics,
    )
    http_client = HttpClient(timeout=config.HTTP_TIMEOUT_SECONDS)
    if places_client is None:
        places_client = PlacesClient(http_client, config.require_google_maps_api_key(), budget)
    if routes_client is None:
        routes_client = RoutesClient(http_client, config.require_mapbox_access_token(), budget)
    return places_client, routes_client


def _run_pass(
    state: _RunState,
    places_client: PlacesClient,
    routes_client: RoutesClient,
    search: _SearchPass,
) -> None:
    request = state.request
    result = places_client.text_search(search.query, request.origin, state.radius_m, search.type_filter)
    if not result.ok:
        state.diagnostics.search_failures += 1
        logger.error("Search failed for %r keyword %r: %s", search.sport, search.query, result.error)
        return

    hits = result.value or []
    state.diagnostics.raw_found += len(hits)
    logger.info("Keyword %r (%s): %d raw results", search.query, search.sport, len(hits))
    for hit in hits:
        entity = _screen_hit(state, hit, search)
        if entity is None:
            continue
        _verify_reachability(state, routes_client, entity)


def _screen_hit(state: _RunState, hit: Dict[str, Any], search: _SearchPass) -> Optional[Entity]:
    """Convert, exclude, score and contain one hit. None means dropped."""
    try:
        entity = convert_place(hit, search.sport)
    except ConversionError as exc:
        state.diagnostics.conversion_failures += 1
        logger.warning("Failed to convert place result: %s", exc)
        return None

    if search.school_types is not None and not _match_school(entity, search.school_types):
        return None

    matched = retail.matched_keyword(entity.name, entity.website)
    if matched:
        state.diagnostics.retail_excluded += 1
        logger.info("Retail exclusion: %r matches %r", entity.name, matched)
        return None

    scoring.apply_scores(entity)
    if entity.is_school:
        scoring.apply_school_boost(entity)
    state.pre_filter.add(entity)

    if state.polygon is not None:
        lng, lat = entity.location.as_lng_lat()
        if not contains_lng_lat(state.polygon, lng, lat):
            logger.debug("Outside reachability polygon: %r [%s, %s]", entity.name, lng, lat)
            return None
    state.diagnostics.after_containment += 1
    return entity


def _match_school(entity: Entity, school_types: Sequence[str]) -> bool:
    if not scoring.looks_like_school(entity.name, entity.place_types):
        return False
    detected = scoring.detect_school_types(entity.name, entity.place_types)
    if detected:
        if not any(t in school_types for t in detected):
            return False
    else:
        phrases = keywords.expand_school_types(school_types)
        lowered = entity.name.lower()
        if not any(p.split(" ")[0] in lowered for p in phrases):
            return False
    entity.is_school = True
    entity.school_types = detected or ["unknown"]
    if "private" in detected:
        entity.entity_type = EntityType.PRIVATE_SCHOOL
    elif "public" in detected:
        entity.entity_type = EntityType.PUBLIC_SCHOOL
    return True


def _verify_reachability(state: _RunState, routes_client: RoutesClient, entity: Entity) -> None:
    request = state.request
    outcome = state.route_memo.get(entity.id)
    if outcome is None:
        outcome = routes_client.route(request.origin.as_lng_lat(), entity.location.as_lng_lat())
        state.route_memo[entity.id] = outcome
    else:
        state.metrics.dedup_skips_routes += 1

    if not outcome.ok:
        state.diagnostics.routing_failures += 1
        logger.error("Directions failed for %r: %s", entity.name, outcome.error)
        if state.polygon is not None:
            entity.drive_time_minutes = None
            entity.distance_miles = None
            state.accepted.add(entity)
        return

    leg = outcome.value
    if leg is None:
        logger.debug("No route to %r", entity.name)
        return

    minutes = seconds_to_minutes(leg.duration_seconds)
    if minutes > request.drive_time_minutes + config.DRIVE_TIME_TOLERANCE_MINUTES:
        logger.debug("Over drive-time budget: %r (%d min)", entity.name, minutes)
        return

    entity.drive_time_minutes = minutes
    entity.distance_miles = meters_to_miles(leg.distance_meters)
    state.diagnostics.after_routing += 1
    state.accepted.add(entity)

