"""Geospatial helpers."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from shapely.geometry import Point, shape
from shapely.geometry.base import BaseGeometry

from . import config


def search_radius_meters(drive_time_minutes: float) -> int:
    return int(min(drive_time_minutes * config.SEARCH_RADIUS_METERS_PER_MINUTE, config.SEARCH_RADIUS_MAX_METERS))


def meters_to_miles(meters: float) -> float:
    return meters * config.METERS_TO_MILES


def seconds_to_minutes(seconds: float) -> int:
    return int(round(seconds / 60.0))


def _is_polygon_geometry(geometry: Any) -> bool:
    if not isinstance(geometry, dict) or geometry.get("type") != "Polygon":
        return False
    coords = geometry.get("coordinates")
    return isinstance(coords, list) and bool(coords) and isinstance(coords[0], list) and len(coords[0]) >= 4


def select_polygon(geojson: Any) -> Optional[Dict[str, Any]]:
    """Return the Polygon geometry to filter with, or None.

    Accepts a bare geometry, a Feature or a FeatureCollection. When several
    polygons are present the one with the most outer-ring coordinates wins.
    Coordinates stay in [lng, lat] order.
    """
    if not isinstance(geojson, dict):
        return None
    kind = geojson.get("type")
    if kind == "Polygon":
        return geojson if _is_polygon_geometry(geojson) else None
    if kind == "Feature":
        geometry = geojson.get("geometry")
        return geometry if _is_polygon_geometry(geometry) else None
    if kind == "FeatureCollection":
        candidates: List[Dict[str, Any]] = []
        for feature in geojson.get("features") or []:
            geometry = feature.get("geometry") if isinstance(feature, dict) else None
            if _is_polygon_geometry(geometry):
                candidates.append(geometry)
        if not candidates:
            return None
        return max(candidates, key=lambda g: len(g["coordinates"][0]))
    return None


def build_polygon(polygon_geojson: Dict[str, Any]) -> BaseGeometry:
    return shape(polygon_geojson)


def contains_lng_lat(polygon: BaseGeometry, lng: float, lat: float) -> bool:
    # Points on the boundary count as inside.
    return polygon.covers(Point(lng, lat))
