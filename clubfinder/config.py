"""Project configuration.

Loads user-defined search parameters from search_config.json when available,
falling back to sensible defaults. Keep API request shapes centralized here.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import ConfigurationError

_REPO_ROOT = Path(__file__).resolve().parent.parent

# --- API endpoints ---

PLACES_TEXT_SEARCH_URL = "https://places.googleapis.com/v1/places:searchText"
MAPBOX_DIRECTIONS_URL = "https://api.mapbox.com/directions/v5/mapbox/driving"
MAPBOX_ISOCHRONE_URL = "https://api.mapbox.com/isochrone/v1/mapbox/driving"

# --- Field masks ---

PLACES_FIELD_MASK = (
    "places.id,places.displayName,places.formattedAddress,places.location,"
    "places.types,places.rating,places.userRatingCount,places.websiteUri,"
    "places.nationalPhoneNumber"
)

# --- Places API request shape ---

PLACES_LANGUAGE_CODE = "en"
PLACES_MAX_RESULT_COUNT = 20
PLACES_RANK_PREFERENCE = "DISTANCE"
PLACES_TEXT_SEARCH_BODY_EXTRA: Dict[str, Any] = {}

# Expected categories for keyword searches. One entry is sent as includedType,
# several are matched client-side against each hit's tags.
PLACES_TYPE_FILTERS: List[str] = [
    "sports_club",
    "sports_complex",
    "sports_facility",
    "school",
    "gym",
    "community_center",
]
PLACES_RESTRICT_TYPES = True

# --- Radius policy ---

SEARCH_RADIUS_METERS_PER_MINUTE = 1000
SEARCH_RADIUS_MAX_METERS = 50000

# --- Routing ---

DRIVE_TIME_TOLERANCE_MINUTES = 1
METERS_TO_MILES = 0.000621371

# --- Scoring ---

# "Is this a Club" cut-off. Earlier iterations used both 3 and 4.
CLUB_CONFIDENCE_THRESHOLD = 3
AGE_GROUP_NOISE_THRESHOLD = 2
POPULAR_VENUE_REVIEW_COUNT = 50
SCHOOL_CONFIDENCE_BOOST = 20
SCHOOL_HIGH_SCHOOL_BOOST = 5

# --- Keywords ---

SPORT_KEYWORDS: Dict[str, List[str]] = {
    "volleyball": [
        "youth volleyball club",
        "volleyball club",
        "travel volleyball",
        "volleyball academy",
        "club volleyball",
        "competitive volleyball",
        "youth volleyball",
        "volleyball training",
    ],
    "basketball": [
        "youth basketball club",
        "basketball club",
        "travel basketball",
        "basketball academy",
        "club basketball",
        "competitive basketball",
        "youth basketball",
        "basketball training",
    ],
    "softball": [
        "youth softball club",
        "softball club",
        "travel softball",
        "softball academy",
        "club softball",
        "competitive softball",
        "youth softball",
        "softball training",
    ],
    "track and field": [
        "youth track club",
        "track and field club",
        "track and field academy",
        "track club",
        "athletics club",
        "running club",
    ],
    "cross country": [
        "youth cross country",
        "cross country club",
        "cross country team",
        "cross country program",
        "cross country training",
        "cross country running",
        "running club",
    ],
}

FALLBACK_QUERY_TEMPLATE = "{sport} gym"

SCHOOL_TYPE_KEYWORDS: Dict[str, List[str]] = {
    "private": ["private school", "private academy", "private high school", "private elementary"],
    "public": ["public school", "public high school", "public middle school", "public elementary"],
    "elementary": ["elementary school", "primary school", "grade school"],
    "middle": ["middle school", "intermediate school"],
    "juniorHigh": ["junior high school", "junior high"],
    "highSchool": ["high school", "secondary school"],
}

RETAIL_EXCLUSIONS_EXTRA: List[str] = []

# --- Bypass ---

BYPASS_SAMPLE_SIZE = 5

# --- Budgets ---

MAX_PLACES_REQUESTS_PER_RUN = 100
MAX_ROUTES_REQUESTS_PER_RUN = 400

# --- HTTP ---

HTTP_TIMEOUT_SECONDS = 20

# --- Credentials ---

GOOGLE_MAPS_API_KEY_ENV = "GOOGLE_MAPS_API_KEY"
MAPBOX_ACCESS_TOKEN_ENV = "MAPBOX_ACCESS_TOKEN"
_PLACEHOLDER_CREDENTIALS = {
    "",
    "your_google_maps_api_key_here",
    "AIzaSyYOUR_REAL_KEY",
    "your_mapbox_access_token_here",
}

# --- Outputs ---

OUTPUT_DIR = "out"


def _credential(name: str) -> Optional[str]:
    value = (os.environ.get(name) or "").strip()
    if value in _PLACEHOLDER_CREDENTIALS:
        return None
    return value


def google_maps_api_key() -> Optional[str]:
    return _credential(GOOGLE_MAPS_API_KEY_ENV)


def mapbox_access_token() -> Optional[str]:
    return _credential(MAPBOX_ACCESS_TOKEN_ENV)


def require_google_maps_api_key() -> str:
    google_key = google_maps_api_key()
    if not google_key:
        raise ConfigurationError(f"{GOOGLE_MAPS_API_KEY_ENV} not configured")
    return google_key


def require_mapbox_access_token() -> str:
    mapbox_token = mapbox_access_token()
    if not mapbox_token:
        raise ConfigurationError(f"{MAPBOX_ACCESS_TOKEN_ENV} not configured")
    return mapbox_token


def load_search_config(path: Optional[str] = None) -> bool:
    """Load search configuration from a JSON file.

    Updates module-level globals with values from the config file.
    Returns True if config was loaded, False if file not found.
    """
    if path is None:
        path = str(_REPO_ROOT / "search_config.json")

    config_path = Path(path)
    if not config_path.exists():
        return False

    with open(config_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    globals_ref = globals()

    sport_keywords = data.get("sport_keywords", {})
    if sport_keywords:
        merged = dict(SPORT_KEYWORDS)
        for sport, phrases in sport_keywords.items():
            merged[str(sport).strip().lower()] = [str(p) for p in phrases if str(p).strip()]
        globals_ref["SPORT_KEYWORDS"] = merged

    if "type_filters" in data:
        globals_ref["PLACES_TYPE_FILTERS"] = list(data["type_filters"] or [])
    if "restrict_types" in data:
        globals_ref["PLACES_RESTRICT_TYPES"] = bool(data["restrict_types"])

    fallback = data.get("fallback_query_template")
    if fallback:
        globals_ref["FALLBACK_QUERY_TEMPLATE"] = str(fallback)

    retail_extra = data.get("retail_exclusions_extra", [])
    if retail_extra:
        globals_ref["RETAIL_EXCLUSIONS_EXTRA"] = [str(s) for s in retail_extra]

    scoring = data.get("scoring", {})
    if "club_threshold" in scoring:
        globals_ref["CLUB_CONFIDENCE_THRESHOLD"] = float(scoring["club_threshold"])
    if "age_group_noise_threshold" in scoring:
        globals_ref["AGE_GROUP_NOISE_THRESHOLD"] = float(scoring["age_group_noise_threshold"])

    radius = data.get("radius", {})
    if "meters_per_minute" in radius:
        globals_ref["SEARCH_RADIUS_METERS_PER_MINUTE"] = int(radius["meters_per_minute"])
    if "max_meters" in radius:
        globals_ref["SEARCH_RADIUS_MAX_METERS"] = int(radius["max_meters"])

    budgets = data.get("budgets", {})
    if "max_places" in budgets:
        globals_ref["MAX_PLACES_REQUESTS_PER_RUN"] = int(budgets["max_places"])
    if "max_routes" in budgets:
        globals_ref["MAX_ROUTES_REQUESTS_PER_RUN"] = int(budgets["max_routes"])

    return True
