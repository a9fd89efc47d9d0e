import pytest

from watchlist_notify.services.service_codes import (
    SERVICE_CATALOG,
    display_name_for_code,
    map_provider_name_to_code,
    normalize_provider_name,
)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Netflix", "netflix"),
        ("Amazon Prime Video", "prime_video"),
        ("Amazon Video", "prime_video"),
        ("Disney Plus", "disney_plus"),
        ("Disney+", "disney_plus"),
        ("HBO Max", "max"),
        ("Max", "max"),
        ("Apple TV+", "apple_tv_plus"),
        ("Apple TV Plus", "apple_tv_plus"),
        ("Apple TV", "apple_tv"),
        ("Paramount+", "paramount_plus"),
        ("Peacock Premium", "peacock"),
        ("  hulu ", "hulu"),
    ],
)
def test_known_provider_names_map_to_codes(name, expected):
    assert map_provider_name_to_code(name) == (expected, True)


def test_unknown_provider_is_reported_as_not_found():
    assert map_provider_name_to_code("Crunchyroll") == ("", False)
    assert map_provider_name_to_code("") == ("", False)


def test_normalization_spells_out_symbols():
    assert normalize_provider_name("Disney+") == "disneyplus"
    assert normalize_provider_name("AMC & Friends!") == "amcandfriends"


def test_every_catalog_code_has_a_display_name():
    for service in SERVICE_CATALOG:
        assert display_name_for_code(service.code) == service.name


def test_display_name_falls_back_to_code():
    assert display_name_for_code("mubi") == "mubi"
