import pytest

from clubfinder.errors import ValidationError
from clubfinder.models import LatLng, SearchRequest


def test_latlng_rejects_out_of_range_and_nan():
    with pytest.raises(ValueError):
        LatLng(91.0, 0.0)
    with pytest.raises(ValueError):
        LatLng(0.0, float("nan"))
    with pytest.raises(ValueError):
        LatLng(True, 0.0)


def test_request_from_dict_accepts_feature_collection():
    ring = [[-112.2, 33.3], [-111.9, 33.3], [-111.9, 33.6], [-112.2, 33.6], [-112.2, 33.3]]
    request = SearchRequest.from_dict(
        {
            "origin": {"lat": 33.45, "lng": -112.07},
            "sports": [" volleyball "],
            "driveTimeMinutes": 15,
            "isochronePolygon": {
                "type": "FeatureCollection",
                "features": [{"type": "Feature", "geometry": {"type": "Polygon", "coordinates": [ring]}}],
            },
            "schoolTypes": ["highSchool"],
        }
    )
    assert request.sports == ["volleyball"]
    assert request.isochrone_polygon["coordinates"] == [ring]
    assert request.school_types == ["highSchool"]


@pytest.mark.parametrize(
    "payload,message",
    [
        ({"sports": ["volleyball"], "driveTimeMinutes": 20}, "Missing origin location"),
        ({"origin": {"lat": 1.0}, "sports": ["volleyball"], "driveTimeMinutes": 20}, "Missing origin location"),
        ({"origin": {"lat": 1.0, "lng": 2.0}, "sports": [], "driveTimeMinutes": 20}, "Missing or empty sports array"),
        ({"origin": {"lat": 1.0, "lng": 2.0}, "driveTimeMinutes": 20}, "Missing or empty sports array"),
        ({"origin": {"lat": 1.0, "lng": 2.0}, "sports": ["volleyball"], "driveTimeMinutes": 0}, "driveTimeMinutes"),
        ({"origin": {"lat": 1.0, "lng": 2.0}, "sports": ["volleyball"], "driveTimeMinutes": "20"}, "driveTimeMinutes"),
        (
            {"origin": {"lat": 1.0, "lng": 2.0}, "sports": ["volleyball"], "driveTimeMinutes": 20, "isochronePolygon": {"type": "Point"}},
            "isochronePolygon",
        ),
    ],
)
def test_request_from_dict_rejects(payload, message):
    with pytest.raises(ValidationError, match=message):
        SearchRequest.from_dict(payload)
