"""Mapping of TMDb provider display names to stable internal service codes."""

from __future__ import annotations

import re
from dataclasses import dataclass

NETFLIX = "netflix"
PRIME_VIDEO = "prime_video"
HULU = "hulu"
DISNEY_PLUS = "disney_plus"
MAX = "max"
APPLE_TV_PLUS = "apple_tv_plus"
APPLE_TV = "apple_tv"
PARAMOUNT_PLUS = "paramount_plus"
PEACOCK = "peacock"


@dataclass(frozen=True)
class ServiceInfo:
    code: str
    name: str


SERVICE_CATALOG: tuple[ServiceInfo, ...] = (
    ServiceInfo(NETFLIX, "Netflix"),
    ServiceInfo(PRIME_VIDEO, "Prime Video"),
    ServiceInfo(HULU, "Hulu"),
    ServiceInfo(DISNEY_PLUS, "Disney+"),
    ServiceInfo(MAX, "Max"),
    ServiceInfo(APPLE_TV_PLUS, "Apple TV+"),
    ServiceInfo(APPLE_TV, "Apple TV"),
    ServiceInfo(PARAMOUNT_PLUS, "Paramount+"),
    ServiceInfo(PEACOCK, "Peacock"),
)

_DISPLAY_NAMES = {service.code: service.name for service in SERVICE_CATALOG}

# Keys are already normalized: symbols spelled out, then only [a-z0-9] kept.
PROVIDER_ALIASES: dict[str, str] = {
    "netflix": NETFLIX,
    "netflixstandardwithads": NETFLIX,
    "netflixbasicwithads": NETFLIX,
    "primevideo": PRIME_VIDEO,
    "amazonprimevideo": PRIME_VIDEO,
    "amazonvideo": PRIME_VIDEO,
    "amazonprimevideowithads": PRIME_VIDEO,
    "hulu": HULU,
    "disneyplus": DISNEY_PLUS,
    "disney": DISNEY_PLUS,
    "max": MAX,
    "hbomax": MAX,
    "maxamazonchannel": MAX,
    "appletvplus": APPLE_TV_PLUS,
    "appletv": APPLE_TV,
    "paramountplus": PARAMOUNT_PLUS,
    "paramountplusessential": PARAMOUNT_PLUS,
    "paramountpluspremium": PARAMOUNT_PLUS,
    "peacock": PEACOCK,
    "peacockpremium": PEACOCK,
    "peacockpremiumplus": PEACOCK,
}

# Order matters only in that all of these run before stripping.
_SYMBOL_WORDS = (
    ("+", "plus"),
    ("&", "and"),
)
_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")


def normalize_provider_name(name: str) -> str:
    """Lowercase, spell out symbols, then drop everything but [a-z0-9]."""
    value = (name or "").strip().lower()
    for symbol, word in _SYMBOL_WORDS:
        value = value.replace(symbol, word)
    return _NON_ALPHANUMERIC.sub("", value)


def map_provider_name_to_code(name: str) -> tuple[str, bool]:
    """Map a TMDb provider display name to a service code.

    Unknown names return ``("", False)``; callers skip them silently.
    """
    code = PROVIDER_ALIASES.get(normalize_provider_name(name))
    if code is None:
        return "", False
    return code, True


def display_name_for_code(code: str) -> str:
    return _DISPLAY_NAMES.get(code, code)


__all__ = [
    "PROVIDER_ALIASES",
    "SERVICE_CATALOG",
    "ServiceInfo",
    "display_name_for_code",
    "map_provider_name_to_code",
    "normalize_provider_name",
]
