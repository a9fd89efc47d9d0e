"""
Title search endpoint.

Proxies movie and TV title search to TMDb through the short-lived search cache.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from watchlist_notify.api.v1.shared.constants import (
    CACHE_STATUS_HEADER,
    RATE_LIMIT_STANDARD,
)
from watchlist_notify.api.v1.shared.dependencies import (
    get_app_settings,
    get_title_search_service,
)
from watchlist_notify.api.v1.shared.errors import bad_request, upstream_failed
from watchlist_notify.api.v1.shared.rate_limit import limiter
from watchlist_notify.core.config import Settings
from watchlist_notify.models.search import SearchResponse, SearchResult
from watchlist_notify.services.availability import (
    AvailabilityValidationError,
    parse_media_type,
)
from watchlist_notify.services.cache_keys import SearchKey
from watchlist_notify.services.title_search import (
    MAX_SEARCH_PAGE,
    SearchValidationError,
    TitleSearchService,
)
from watchlist_notify.services.tmdb_errors import ProviderSourceError

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_page(raw: str | None) -> int:
    if raw is None or raw == "":
        return 1
    try:
        page = int(raw)
    except ValueError:
        raise bad_request("invalid page") from None
    if not 1 <= page <= MAX_SEARCH_PAGE:
        raise bad_request("invalid page")
    return page


def _parse_flag(raw: str | None) -> bool:
    return raw is not None and (raw == "1" or raw.lower() == "true")


@router.get(
    "/search",
    response_model=SearchResponse,
    summary="Search movies or TV shows by title",
)
@limiter.limit(RATE_LIMIT_STANDARD.value)
async def search_titles(
    request: Request,
    response: Response,
    query: Annotated[str | None, Query(description="Title text to search for.")] = None,
    media_type: Annotated[
        str | None, Query(alias="type", description="'movie' (default) or 'tv'.")
    ] = None,
    page: Annotated[str | None, Query(description="Result page, 1-1000.")] = None,
    include_adult: Annotated[
        str | None, Query(description="'true' or '1' to include adult titles.")
    ] = None,
    language: Annotated[str | None, Query(description="TMDb language, e.g. 'en-US'.")] = None,
    region: Annotated[
        str | None, Query(description="Region hint; only applied to movie search.")
    ] = None,
    service: TitleSearchService = Depends(get_title_search_service),
    settings: Settings = Depends(get_app_settings),
) -> SearchResponse:
    """Search TMDb, serving repeated queries from the cache."""
    query_text = (query or "").strip()
    if not query_text:
        raise bad_request("query required")
    try:
        resolved_type = parse_media_type(media_type or "movie")
    except AvailabilityValidationError as exc:
        raise bad_request(str(exc)) from exc

    resolved_region = region or settings.default_region or ""
    key = SearchKey(
        query=query_text,
        page=_parse_page(page),
        include_adult=_parse_flag(include_adult),
        language=language or None,
        region=resolved_region or None,
        type=resolved_type,
    )

    try:
        outcome = await service.search(key)
    except SearchValidationError as exc:
        raise bad_request(str(exc)) from exc
    except ProviderSourceError as exc:
        logger.warning("tmdb: search failed for %s: %s", key, exc)
        raise upstream_failed("search") from exc

    response.headers[CACHE_STATUS_HEADER] = outcome.cache_status
    return SearchResponse(
        results=[SearchResult.from_dto(item) for item in outcome.page.results],
        page=outcome.page.page,
        total_pages=outcome.page.total_pages,
        query=query_text,
        type=resolved_type,
        include_adult=key.include_adult,
        language=language or "",
        region=resolved_region,
    )
