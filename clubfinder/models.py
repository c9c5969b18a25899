"""Typed records passed between the pipeline stages."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar

from .errors import ProviderRequestError, ValidationError
from .geo import select_polygon

T = TypeVar("T")


class AgeGroup(str, Enum):
    YOUTH = "youth"
    HIGH_SCHOOL = "highSchool"
    ADULT = "adult"
    ELITE = "elite"


class EntityType(str, Enum):
    CLUB = "Club"
    PUBLIC_SCHOOL = "Public School"
    PRIVATE_SCHOOL = "Private School"
    COLLEGE = "College"
    UNKNOWN = "Unknown"


def empty_age_group_scores() -> Dict[AgeGroup, int]:
    return {group: 0 for group in AgeGroup}


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value) and not math.isinf(value)


@dataclass(frozen=True)
class LatLng:
    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not _is_number(self.lat) or not _is_number(self.lng):
            raise ValueError(f"Invalid coordinates: lat={self.lat}, lng={self.lng}")
        if not -90 <= self.lat <= 90 or not -180 <= self.lng <= 180:
            raise ValueError(f"Invalid coordinates: lat={self.lat}, lng={self.lng}")

    def as_lng_lat(self) -> Tuple[float, float]:
        return (self.lng, self.lat)

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass
class Entity:
    id: str
    name: str
    location: LatLng
    address: str = ""
    phone: Optional[str] = None
    website: Optional[str] = None
    place_types: List[str] = field(default_factory=list)
    rating: Optional[float] = None
    review_count: Optional[int] = None
    sport: str = ""
    confidence_score: float = 0
    confidence_signals: List[str] = field(default_factory=list)
    age_group_scores: Dict[AgeGroup, int] = field(default_factory=empty_age_group_scores)
    primary_age_group: Optional[AgeGroup] = None
    is_club: bool = False
    is_school: bool = False
    school_types: List[str] = field(default_factory=list)
    entity_type: EntityType = EntityType.UNKNOWN
    drive_time_minutes: Optional[int] = None
    distance_miles: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "website": self.website,
            "location": self.location.to_dict(),
            "placeTypes": list(self.place_types),
            "rating": self.rating,
            "reviewCount": self.review_count,
            "sport": self.sport,
            "confidenceScore": self.confidence_score,
            "confidenceSignals": list(self.confidence_signals),
            "ageGroupScores": {group.value: score for group, score in self.age_group_scores.items()},
            "primaryAgeGroup": self.primary_age_group.value if self.primary_age_group else None,
            "isClub": self.is_club,
            "isSchool": self.is_school,
            "schoolTypes": list(self.school_types),
            "entityType": self.entity_type.value,
            "driveTimeMinutes": self.drive_time_minutes,
            "distanceMiles": self.distance_miles,
        }


@dataclass(frozen=True)
class RouteLeg:
    distance_meters: float
    duration_seconds: float


@dataclass(frozen=True)
class ProviderResult(Generic[T]):
    """Outcome of a single provider call: a value or the error that replaced it."""

    value: Optional[T] = None
    error: Optional[ProviderRequestError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "ProviderResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ProviderRequestError) -> "ProviderResult[T]":
        return cls(error=error)


@dataclass
class SearchRequest:
    origin: LatLng
    sports: List[str]
    drive_time_minutes: float
    isochrone_polygon: Optional[Dict[str, Any]] = None
    school_types: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "SearchRequest":
        """Validate a request payload in the wire shape.

        Raises ValidationError for anything that should abort the request
        before a provider call is made.
        """
        if not isinstance(data, dict):
            raise ValidationError("Invalid request format. Expected an object.")

        origin = data.get("origin")
        if not isinstance(origin, dict) or origin.get("lat") is None or origin.get("lng") is None:
            raise ValidationError("Missing origin location")
        try:
            origin_point = LatLng(origin["lat"], origin["lng"])
        except ValueError as exc:
            raise ValidationError(f"Invalid origin location: {exc}") from exc

        sports = data.get("sports")
        if not isinstance(sports, list) or not sports:
            raise ValidationError("Missing or empty sports array")
        cleaned_sports = [str(s).strip() for s in sports if isinstance(s, str) and s.strip()]
        if len(cleaned_sports) != len(sports):
            raise ValidationError("Sports must be non-empty strings")

        minutes = data.get("driveTimeMinutes")
        if not _is_number(minutes) or minutes <= 0:
            raise ValidationError("driveTimeMinutes must be a positive number")

        polygon = None
        raw_polygon = data.get("isochronePolygon")
        if raw_polygon is not None:
            polygon = select_polygon(raw_polygon)
            if polygon is None:
                raise ValidationError("isochronePolygon must be a GeoJSON Polygon")

        school_types = data.get("schoolTypes") or []
        if not isinstance(school_types, list):
            raise ValidationError("schoolTypes must be a list")

        return cls(
            origin=origin_point,
            sports=cleaned_sports,
            drive_time_minutes=minutes,
            isochrone_polygon=polygon,
            school_types=[str(t) for t in school_types],
        )


@dataclass
class Diagnostics:
    raw_found: int = 0
    after_containment: int = 0
    after_routing: int = 0
    unique_count: int = 0
    bypassed: bool = False
    retail_excluded: int = 0
    conversion_failures: int = 0
    search_failures: int = 0
    routing_failures: int = 0
    used_fallback: bool = False
    has_reachability_polygon: bool = False
    avg_confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rawFound": self.raw_found,
            "afterContainment": self.after_containment,
            "afterRouting": self.after_routing,
            "uniqueCount": self.unique_count,
            "bypassed": self.bypassed,
            "retailExcluded": self.retail_excluded,
            "conversionFailures": self.conversion_failures,
            "searchFailures": self.search_failures,
            "routingFailures": self.routing_failures,
            "usedFallback": self.used_fallback,
            "hasReachabilityPolygon": self.has_reachability_polygon,
            "avgConfidence": self.avg_confidence,
        }


@dataclass
class SearchResponse:
    entities: List[Entity]
    diagnostics: Diagnostics

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entities": [e.to_dict() for e in self.entities],
            "diagnostics": self.diagnostics.to_dict(),
        }
