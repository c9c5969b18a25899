from clubfinder import config, keywords


def test_known_sport_is_specific_first():
    phrases = keywords.expand("Volleyball")
    assert phrases[0] == "youth volleyball club"
    assert phrases[-1] == "volleyball training"
    assert len(phrases) == len(set(phrases))


def test_unknown_sport_gets_generated_phrases():
    assert keywords.expand("  Water  Polo ") == [
        "youth water polo club",
        "water polo club",
        "water polo academy",
        "water polo team",
        "water polo",
    ]


def test_config_override(monkeypatch):
    monkeypatch.setattr(config, "SPORT_KEYWORDS", {"lacrosse": ["lacrosse club", "lacrosse club", "lacrosse"]})
    assert keywords.expand("lacrosse") == ["lacrosse club", "lacrosse"]


def test_school_types_expand_in_order_without_duplicates():
    phrases = keywords.expand_school_types(["highSchool", "private", "unknown"])
    assert phrases[:2] == ["high school", "secondary school"]
    assert "private school" in phrases
    assert len(phrases) == len(set(phrases))


def test_fallback_query():
    assert keywords.fallback_query("Basketball") == "basketball gym"
