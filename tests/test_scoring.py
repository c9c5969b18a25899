import pytest

from clubfinder import config
from clubfinder.models import AgeGroup, Entity, LatLng
from clubfinder.scoring import (
    age_group_scores,
    apply_scores,
    confidence_score,
    detect_school_types,
    is_club,
    primary_age_group,
    score_confidence,
)


def make_entity(name, website=None, types=None, review_count=None):
    return Entity(
        id=name.lower().replace(" ", "-"),
        name=name,
        location=LatLng(33.45, -112.07),
        website=website,
        place_types=list(types or []),
        review_count=review_count,
    )


def test_elite_academy_scenario():
    entity = make_entity(
        "Elite Volleyball Academy",
        website="https://elitevb.example.com/12u-travel",
        types=["sports_club"],
    )
    apply_scores(entity)

    assert entity.confidence_score >= 7
    assert entity.age_group_scores[AgeGroup.ELITE] >= 3
    assert entity.primary_age_group == AgeGroup.ELITE
    assert entity.is_club is True


def test_confidence_rules_add_up():
    entity = make_entity("Scottsdale Select", website="https://example.com/tryouts", types=["school"])
    score, signals = score_confidence(entity)
    # name +3, school +1, website +2, tryouts +2
    assert score == 8
    assert "name keywords" in signals
    assert "club-specific website content" in signals


def test_confidence_is_floor_clamped_at_zero():
    entity = make_entity("Joe's Sports Bar", types=["bar", "restaurant"], review_count=120)
    assert confidence_score(entity) == 0


def test_venue_word_inside_another_word_is_not_penalized():
    entity = make_entity("Barracudas Volleyball Club")
    assert confidence_score(entity) == 3


def test_website_without_club_language_gets_base_points_only():
    entity = make_entity("Sun Valley Volleyball Training", website="https://sunvalley.example.com")
    assert confidence_score(entity) == 2


def test_age_group_type_and_review_signals():
    scores = age_group_scores(make_entity("Joe's Sports Bar", types=["bar"], review_count=51))
    assert scores[AgeGroup.ADULT] == 3
    assert scores[AgeGroup.YOUTH] == 0

    scores = age_group_scores(make_entity("Central Campus", types=["school"]))
    assert scores[AgeGroup.HIGH_SCHOOL] == 2

    scores = age_group_scores(make_entity("Court House", types=["sports_complex"]))
    assert scores[AgeGroup.YOUTH] == 1
    assert scores[AgeGroup.ELITE] == 1


def test_age_group_keywords():
    scores = age_group_scores(make_entity("Varsity Volleyball 16U"))
    assert scores[AgeGroup.HIGH_SCHOOL] == 3
    scores = age_group_scores(make_entity("Valley Juniors", website="https://x.example.com/adult-leagues"))
    assert scores[AgeGroup.YOUTH] == 3
    assert scores[AgeGroup.ADULT] == 3


def test_all_age_group_scores_non_negative():
    scores = age_group_scores(make_entity("Joe's Bar & Grill", types=["bar", "gym"]))
    assert all(v >= 0 for v in scores.values())
    assert set(scores) == set(AgeGroup)


def test_primary_age_group_requires_noise_threshold():
    assert primary_age_group({g: 0 for g in AgeGroup}) is None
    assert primary_age_group({AgeGroup.YOUTH: 1, AgeGroup.HIGH_SCHOOL: 0, AgeGroup.ADULT: 1, AgeGroup.ELITE: 0}) is None
    assert (
        primary_age_group({AgeGroup.YOUTH: 2, AgeGroup.HIGH_SCHOOL: 0, AgeGroup.ADULT: 1, AgeGroup.ELITE: 0})
        == AgeGroup.YOUTH
    )


def test_primary_age_group_tie_prefers_more_competitive_bracket():
    scores = {AgeGroup.YOUTH: 4, AgeGroup.HIGH_SCHOOL: 4, AgeGroup.ADULT: 4, AgeGroup.ELITE: 1}
    assert primary_age_group(scores) == AgeGroup.HIGH_SCHOOL


def test_is_club_uses_single_threshold(monkeypatch):
    assert is_club(config.CLUB_CONFIDENCE_THRESHOLD) is True
    assert is_club(config.CLUB_CONFIDENCE_THRESHOLD - 1) is False
    monkeypatch.setattr(config, "CLUB_CONFIDENCE_THRESHOLD", 4)
    assert is_club(3) is False
    assert is_club(3, threshold=3) is True


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Camelback Private High School", ["private", "highSchool"]),
        ("Lincoln Elementary School", ["elementary"]),
        ("Desert Ridge Junior High", ["juniorHigh"]),
        ("Phoenix Country Day", []),
    ],
)
def test_detect_school_types(name, expected):
    assert detect_school_types(name, ["school"]) == expected


def test_run_together_website_still_counts_as_club_content():
    entity = make_entity("Desert Heat", website="https://www.desertheattryouts.com")
    score, signals = score_confidence(entity)
    assert "club-specific website content" in signals
    assert score == 4


def test_age_brackets_inside_url_path():
    scores = age_group_scores(make_entity("Desert Heat", website="https://desertheatyouth.org/12uteams"))
    assert scores[AgeGroup.YOUTH] >= 3
