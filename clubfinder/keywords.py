"""Search phrase expansion for sport categories and school types."""
from __future__ import annotations

from typing import Iterable, List

from . import config


def normalize_sport(sport: str) -> str:
    return " ".join(str(sport).lower().split())


def expand(sport: str) -> List[str]:
    """Search phrases for a sport, most club-specific first.

    Every phrase is searched; the order decides which phrase tags an entity
    first when the same place comes back more than once.
    """
    key = normalize_sport(sport)
    phrases = config.SPORT_KEYWORDS.get(key)
    if not phrases:
        phrases = [
            f"youth {key} club",
            f"{key} club",
            f"{key} academy",
            f"{key} team",
            key,
        ]
    return list(dict.fromkeys(phrases))


def expand_school_types(school_types: Iterable[str]) -> List[str]:
    phrases: List[str] = []
    for school_type in school_types:
        phrases.extend(config.SCHOOL_TYPE_KEYWORDS.get(school_type, []))
    return list(dict.fromkeys(phrases))


def fallback_query(sport: str) -> str:
    return config.FALLBACK_QUERY_TEMPLATE.format(sport=normalize_sport(sport))
