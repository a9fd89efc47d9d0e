import pytest

from watchlist_notify.services.availability import (
    apply_region_override,
    parse_media_type,
    resolve_region,
    validate_title_id,
)


@pytest.mark.parametrize(
    ("requested", "user_region", "default", "expected"),
    [
        ("gb", "DE", "FR", "GB"),
        (None, "de", "FR", "DE"),
        ("  ", None, "fr", "FR"),
        (None, None, None, "US"),
        ("", "", "", "US"),
        ("usa", "DE", None, "US"),
        ("1A", None, None, "US"),
    ],
)
def test_resolve_region_chain(requested, user_region, default, expected):
    assert resolve_region(requested, user_region, default) == expected


def test_malformed_region_does_not_fall_through_to_next_candidate():
    assert resolve_region("xyz", "GB", "DE") == "US"


@pytest.mark.parametrize(
    ("override", "expected"),
    [("ca", "CA"), (None, "GB"), ("", "GB"), ("canada", "GB")],
)
def test_apply_region_override(override, expected):
    assert apply_region_override("GB", override) == expected


def test_parse_media_type_normalizes():
    assert parse_media_type(" TV ") == "tv"
    assert parse_media_type("movie") == "movie"


@pytest.mark.parametrize("raw", [True, 0, -1, 1.5, "1.5", None, "x"])
def test_validate_title_id_rejects(raw):
    with pytest.raises(ValueError):
        validate_title_id(raw)


def test_validate_title_id_accepts_numeric_strings():
    assert validate_title_id("603") == 603
    assert validate_title_id(42.0) == 42
