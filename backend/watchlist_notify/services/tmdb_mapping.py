"""Pure mapping utilities for TMDb payloads."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from watchlist_notify.services.tmdb_dto import (
    Provider,
    ProvidersResponse,
    RegionProviders,
    SearchPage,
    SearchResult,
)

MEDIA_TYPES = ("movie", "tv")


def _to_int(value: Any, default: int = 0) -> int:
    if value is None:
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


def _to_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def year_from_date(value: str | None) -> int:
    """Extract the year from an ISO-ish date string, 0 if absent."""
    if isinstance(value, str) and len(value) >= 4 and value[:4].isdigit():
        return int(value[:4])
    return 0


def map_provider(data: dict[str, Any]) -> Provider:
    """Map a raw provider entry to a Provider DTO."""
    return Provider(
        provider_id=_to_int(data.get("provider_id")),
        provider_name=_to_str(data.get("provider_name")),
        logo_path=_to_str(data.get("logo_path")),
        display_priority=_to_int(data.get("display_priority")),
    )


def _list_field(data: dict[str, Any], name: str) -> list[Any]:
    raw = data.get(name)
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError(f"'{name}' must be a list")
    return raw


def _map_bucket(data: dict[str, Any], name: str) -> list[Provider]:
    return [map_provider(item) for item in _list_field(data, name) if isinstance(item, dict)]


def map_region_providers(data: dict[str, Any]) -> RegionProviders:
    """Map one region's provider buckets.

    Raises:
        ValueError: if the region entry or one of its buckets has the wrong shape
    """
    if not isinstance(data, dict):
        raise ValueError("region providers must be an object")
    return RegionProviders(
        link=_to_str(data.get("link")),
        flatrate=_map_bucket(data, "flatrate"),
        free=_map_bucket(data, "free"),
        ads=_map_bucket(data, "ads"),
        buy=_map_bucket(data, "buy"),
        rent=_map_bucket(data, "rent"),
    )


def map_providers_response(data: dict[str, Any]) -> ProvidersResponse:
    """Map a watch/providers payload (upstream or cached) to ProvidersResponse.

    Raises:
        ValueError: if the payload is not a JSON object
    """
    if not isinstance(data, dict):
        raise ValueError("providers payload must be an object")
    raw_results = data.get("results") or {}
    if not isinstance(raw_results, dict):
        raise ValueError("providers payload 'results' must be an object")
    return ProvidersResponse(
        id=_to_int(data.get("id")),
        results={
            str(region).upper(): map_region_providers(entry)
            for region, entry in raw_results.items()
        },
    )


def map_search_entry(
    data: dict[str, Any], forced_type: str, image_base_url: str
) -> SearchResult:
    """Map a raw search hit, resolving title, year and media type fallbacks."""
    title = ""
    for key in ("title", "name", "original_title", "original_name"):
        title = _to_str(data.get(key)).strip()
        if title:
            break

    year = year_from_date(data.get("release_date")) or year_from_date(
        data.get("first_air_date")
    )

    media_type = forced_type
    if not media_type:
        raw_type = _to_str(data.get("media_type")).strip().lower()
        if raw_type in MEDIA_TYPES:
            media_type = raw_type
    if not media_type:
        media_type = "tv" if data.get("first_air_date") else "movie"

    poster_path = _to_str(data.get("poster_path"))
    return SearchResult(
        tmdb_id=_to_int(data.get("id")),
        title=title,
        year=year,
        type=media_type,
        poster_url=f"{image_base_url}{poster_path}" if poster_path else "",
        poster_path=poster_path,
    )


def map_search_page(
    data: dict[str, Any], forced_type: str, image_base_url: str
) -> SearchPage:
    """Map a raw search response to a SearchPage."""
    if not isinstance(data, dict):
        raise ValueError("search payload must be an object")
    return SearchPage(
        results=[
            map_search_entry(item, forced_type, image_base_url)
            for item in _list_field(data, "results")
            if isinstance(item, dict)
        ],
        page=_to_int(data.get("page")),
        total_pages=_to_int(data.get("total_pages")),
    )


def map_cached_search_page(data: dict[str, Any]) -> SearchPage:
    """Rebuild a SearchPage from its cached (already processed) form."""
    if not isinstance(data, dict):
        raise ValueError("cached search payload must be an object")
    return SearchPage(
        results=[
            SearchResult(
                tmdb_id=_to_int(item.get("tmdb_id")),
                title=_to_str(item.get("title")),
                year=_to_int(item.get("year")),
                type=_to_str(item.get("type")),
                poster_url=_to_str(item.get("poster_url")),
                poster_path=_to_str(item.get("poster_path")),
            )
            for item in _list_field(data, "results")
            if isinstance(item, dict)
        ],
        page=_to_int(data.get("page")),
        total_pages=_to_int(data.get("total_pages")),
    )


def to_payload(value: ProvidersResponse | SearchPage) -> dict[str, Any]:
    """Convert a DTO into a JSON-compatible dict."""
    return asdict(value)


__all__ = [
    "MEDIA_TYPES",
    "map_cached_search_page",
    "map_provider",
    "map_providers_response",
    "map_region_providers",
    "map_search_entry",
    "map_search_page",
    "to_payload",
    "year_from_date",
]
