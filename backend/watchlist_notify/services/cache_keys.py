"""
Cache key generation for TMDb-backed lookups.

Keys are canonicalized so logically identical queries always map to the same
string: text is trimmed and lowercased (regions uppercased), absent optional
values become a "-" placeholder, and every free-text segment is
percent-encoded so a value can never forge the ":" or "=" delimiters.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

SEARCH_KEY_PREFIX = "search:v1"
PROVIDERS_KEY_PREFIX = "providers:v1"
PLACEHOLDER = "-"


def _segment(value: str) -> str:
    return quote(value, safe="") if value else PLACEHOLDER


@dataclass(frozen=True)
class SearchKey:
    """Cache key for one page of title search results."""

    query: str
    page: int = 1
    include_adult: bool = False
    language: str | None = None
    region: str | None = None
    type: str = "movie"

    def __str__(self) -> str:
        query = (self.query or "").strip().lower()
        language = (self.language or "").strip().lower()
        region = (self.region or "").strip().upper()
        media_type = (self.type or "").strip().lower()

        return (
            f"{SEARCH_KEY_PREFIX}"
            f":q={quote(query, safe='')}"
            f":p={int(self.page)}"
            f":adult={'true' if self.include_adult else 'false'}"
            f":lang={_segment(language)}"
            f":region={_segment(region)}"
            f":type={_segment(media_type)}"
        )


@dataclass(frozen=True)
class ProvidersKey:
    """Cache key for the full watch-provider listing of one title."""

    id: int
    type: str

    def __str__(self) -> str:
        media_type = (self.type or "").strip().lower()
        if media_type not in ("movie", "tv"):
            media_type = "movie"
        return f"{PROVIDERS_KEY_PREFIX}:type={media_type}:id={int(self.id)}"


__all__ = ["SearchKey", "ProvidersKey", "SEARCH_KEY_PREFIX", "PROVIDERS_KEY_PREFIX"]
