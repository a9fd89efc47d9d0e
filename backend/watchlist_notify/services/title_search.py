"""Cache-aside title search against TMDb."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from watchlist_notify.services.cache import CacheError, CacheService
from watchlist_notify.services.cache_keys import SearchKey
from watchlist_notify.services.tmdb_dto import SearchPage

logger = logging.getLogger(__name__)

MAX_SEARCH_PAGE = 1000


class SearchValidationError(ValueError):
    """Raised for an empty query or an out-of-range page."""


class SearchSource(Protocol):
    async def search(
        self,
        query: str,
        *,
        page: int = 1,
        include_adult: bool = False,
        language: str | None = None,
        region: str | None = None,
        media_type: str = "movie",
    ) -> SearchPage:
        ...


@dataclass(frozen=True)
class SearchOutcome:
    page: SearchPage
    cache_status: str


class TitleSearchService:
    """Search with the short-lived search TTL; the cache never fails a request."""

    def __init__(self, cache: CacheService, source: SearchSource) -> None:
        self._cache = cache
        self._source = source

    async def search(self, key: SearchKey) -> SearchOutcome:
        """Serve ``key`` from cache or TMDb.

        Raises:
            SearchValidationError: for a blank query or bad page
            ProviderSourceError: when the cache misses and TMDb fails
        """
        if not key.query or not key.query.strip():
            raise SearchValidationError("query required")
        if not 1 <= key.page <= MAX_SEARCH_PAGE:
            raise SearchValidationError("invalid page")

        cache_status = "miss"
        try:
            cached = await self._cache.get_search(key)
        except CacheError as exc:
            logger.warning("cache: search lookup failed for %s: %s", key, exc)
            cached = None
            cache_status = "error"
        if cached is not None:
            return SearchOutcome(page=cached, cache_status="hit")

        page = await self._source.search(
            key.query.strip(),
            page=key.page,
            include_adult=key.include_adult,
            language=key.language or None,
            region=key.region or None,
            media_type=key.type,
        )
        try:
            await self._cache.set_search(key, page)
        except CacheError as exc:
            logger.warning("cache: search store failed for %s: %s", key, exc)
        return SearchOutcome(page=page, cache_status=cache_status)


__all__ = [
    "MAX_SEARCH_PAGE",
    "SearchOutcome",
    "SearchSource",
    "SearchValidationError",
    "TitleSearchService",
]
