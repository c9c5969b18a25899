"""Rule-based confidence and age-group scoring.

Every rule reads only the entity's own text and tags; no provider calls.
Club and age-bracket keywords are plain substrings, since websites run
words together ("desertheattryouts.com"). Venue penalties match whole
words only, so "barracudas" does not contain "bar".
"""
from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Pattern, Tuple

from . import config
from .models import AgeGroup, Entity, empty_age_group_scores


def _any_of(*alternatives: str) -> Pattern[str]:
    return re.compile("(?:" + "|".join(alternatives) + ")", re.IGNORECASE)


def _words(*alternatives: str) -> Pattern[str]:
    return re.compile(r"\b(?:" + "|".join(alternatives) + r")\b", re.IGNORECASE)


CLUB_NAME_PATTERN = _any_of("club", "juniors", "academy", "select", "travel")
VENUE_NAME_PATTERN = _words("bar", "restaurant", "grill", "cantina", "pub")
CLUB_WEBSITE_PATTERN = _any_of(
    "tryout", "teams", "roster", r"age[\s_-]?groups?", "12u", "14u", "16u", "18u"
)

SPORTS_FACILITY_TYPES = {"sports_club", "sports_complex", "sports_facility"}
SCHOOL_TYPE = "school"
NEGATIVE_TYPES = {"restaurant", "bar", "gym", "fitness_center"}
ADULT_VENUE_TYPES = {"bar", "restaurant"}

CLUB_NAME_POINTS = 3
VENUE_NAME_PENALTY = 3
SPORTS_FACILITY_POINTS = 2
SCHOOL_TYPE_POINTS = 1
NEGATIVE_TYPE_PENALTY = 2
WEBSITE_POINTS = 2
CLUB_WEBSITE_POINTS = 2

AGE_GROUP_PATTERNS: Dict[AgeGroup, Pattern[str]] = {
    AgeGroup.YOUTH: _any_of("youth", "junior", "juniors", "12u", "13u", "14u"),
    AgeGroup.HIGH_SCHOOL: _any_of("15u", "16u", "17u", "18u", "varsity", r"high[\s_-]?school"),
    AgeGroup.ADULT: _any_of("adult", "open", "rec", "recreation"),
    AgeGroup.ELITE: _any_of("elite", "academy", "performance", r"college[\s_-]?prep"),
}
AGE_GROUP_KEYWORD_POINTS = 3

# Ties go to the more competitive bracket.
AGE_GROUP_TIE_ORDER: Tuple[AgeGroup, ...] = (
    AgeGroup.ELITE,
    AgeGroup.HIGH_SCHOOL,
    AgeGroup.YOUTH,
    AgeGroup.ADULT,
)

_SCHOOL_TYPE_MARKERS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("private", ("private",)),
    ("public", ("public",)),
    ("elementary", ("elementary", "primary", "grade school")),
    ("middle", ("middle school", "intermediate")),
    ("juniorHigh", ("junior high",)),
    ("highSchool", ("high school", "secondary")),
)


def _types(entity: Entity) -> set:
    return set(entity.place_types or [])


def score_confidence(entity: Entity) -> Tuple[int, List[str]]:
    """Return (score, signals) where signals name each rule that fired."""
    score = 0
    signals: List[str] = []
    name = entity.name or ""
    website = entity.website or ""
    types = _types(entity)

    if CLUB_NAME_PATTERN.search(name):
        score += CLUB_NAME_POINTS
        signals.append("name keywords")
    if VENUE_NAME_PATTERN.search(name):
        score -= VENUE_NAME_PENALTY
        signals.append("negative name keywords")

    if types & SPORTS_FACILITY_TYPES:
        score += SPORTS_FACILITY_POINTS
        signals.append("sports facility type")
    if SCHOOL_TYPE in types:
        score += SCHOOL_TYPE_POINTS
        signals.append("school type")
    if types & NEGATIVE_TYPES:
        score -= NEGATIVE_TYPE_PENALTY
        signals.append("negative type")

    if website:
        score += WEBSITE_POINTS
        signals.append("has website")
        if CLUB_WEBSITE_PATTERN.search(website):
            score += CLUB_WEBSITE_POINTS
            signals.append("club-specific website content")

    return max(0, score), signals


def confidence_score(entity: Entity) -> int:
    return score_confidence(entity)[0]


def age_group_scores(entity: Entity) -> Dict[AgeGroup, int]:
    scores = empty_age_group_scores()
    text = f"{entity.name or ''} {entity.website or ''}"
    types = _types(entity)

    for group, pattern in AGE_GROUP_PATTERNS.items():
        if pattern.search(text):
            scores[group] += AGE_GROUP_KEYWORD_POINTS

    if SCHOOL_TYPE in types:
        scores[AgeGroup.HIGH_SCHOOL] += 2
    if types & SPORTS_FACILITY_TYPES:
        scores[AgeGroup.YOUTH] += 1
        scores[AgeGroup.ELITE] += 1
    if types & ADULT_VENUE_TYPES:
        scores[AgeGroup.ADULT] += 2

    # Popular general-audience venues skew adult.
    if entity.review_count and entity.review_count > config.POPULAR_VENUE_REVIEW_COUNT:
        scores[AgeGroup.ADULT] += 1

    return scores


def primary_age_group(scores: Dict[AgeGroup, int]) -> Optional[AgeGroup]:
    if not scores:
        return None
    best = max(AGE_GROUP_TIE_ORDER, key=lambda g: (scores.get(g, 0), -AGE_GROUP_TIE_ORDER.index(g)))
    if scores.get(best, 0) >= config.AGE_GROUP_NOISE_THRESHOLD:
        return best
    return None


def is_club(score: float, threshold: Optional[float] = None) -> bool:
    if threshold is None:
        threshold = config.CLUB_CONFIDENCE_THRESHOLD
    return score >= threshold


def detect_school_types(name: str, place_types: Iterable[str]) -> List[str]:
    lowered = (name or "").lower()
    types = [t.lower() for t in place_types or []]
    detected = []
    for school_type, markers in _SCHOOL_TYPE_MARKERS:
        if any(m in lowered for m in markers):
            detected.append(school_type)
        elif school_type in ("private", "public") and any(school_type in t for t in types):
            detected.append(school_type)
    return detected


def looks_like_school(name: str, place_types: Iterable[str]) -> bool:
    lowered = (name or "").lower()
    if any("school" in t or "educational" in t for t in place_types or []):
        return True
    return any(word in lowered for word in ("school", "academy", "preparatory"))


def apply_scores(entity: Entity) -> Entity:
    """Attach confidence, age-group scores and the club flag in place."""
    score, signals = score_confidence(entity)
    entity.confidence_score = score
    entity.confidence_signals = signals
    entity.age_group_scores = age_group_scores(entity)
    entity.primary_age_group = primary_age_group(entity.age_group_scores)
    entity.is_club = is_club(score)
    return entity


def apply_school_boost(entity: Entity) -> Entity:
    entity.confidence_score += config.SCHOOL_CONFIDENCE_BOOST
    entity.confidence_signals.append("school search match")
    entity.age_group_scores[AgeGroup.HIGH_SCHOOL] += config.SCHOOL_HIGH_SCHOOL_BOOST
    entity.primary_age_group = primary_age_group(entity.age_group_scores)
    entity.is_club = True
    return entity
