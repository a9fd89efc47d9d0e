"""Data transfer objects used by the TMDb client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(frozen=True)
class Provider:
    """One provider entry inside a region bucket."""

    provider_id: int
    provider_name: str
    logo_path: str = ""
    display_priority: int = 0


@dataclass(frozen=True)
class RegionProviders:
    """Provider buckets for one region, in upstream order."""

    link: str = ""
    flatrate: List[Provider] = field(default_factory=list)
    free: List[Provider] = field(default_factory=list)
    ads: List[Provider] = field(default_factory=list)
    buy: List[Provider] = field(default_factory=list)
    rent: List[Provider] = field(default_factory=list)


@dataclass(frozen=True)
class ProvidersResponse:
    """Full watch-provider listing for one title, keyed by region code."""

    id: int
    results: Dict[str, RegionProviders] = field(default_factory=dict)


@dataclass(frozen=True)
class SearchResult:
    """Processed search hit."""

    tmdb_id: int
    title: str
    year: int
    type: str
    poster_url: str = ""
    poster_path: str = ""


@dataclass(frozen=True)
class SearchPage:
    """One page of search hits plus pagination metadata."""

    results: List[SearchResult]
    page: int
    total_pages: int


__all__ = [
    "Provider",
    "RegionProviders",
    "ProvidersResponse",
    "SearchResult",
    "SearchPage",
]
