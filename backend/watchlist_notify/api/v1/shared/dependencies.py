"""
Shared dependency injection functions for API endpoints.
"""

import logging
from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.exc import SQLAlchemyError

from watchlist_notify.api.v1.shared.constants import USER_EMAIL_HEADER
from watchlist_notify.api.v1.shared.errors import (
    availability_unavailable,
    unauthorized,
    user_lookup_failed,
)
from watchlist_notify.core.config import Settings
from watchlist_notify.persistence.dependencies import get_user_directory
from watchlist_notify.services.availability import AvailabilityResolver
from watchlist_notify.services.availability_batch import BatchOrchestrator
from watchlist_notify.services.cache import CacheService, get_cache_service
from watchlist_notify.services.title_search import TitleSearchService
from watchlist_notify.services.tmdb_client import TMDbClient
from watchlist_notify.services.users import UserDirectory, UserRecord

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    """Settings the running application was created with."""
    return request.app.state.settings


def get_optional_tmdb_client(request: Request) -> TMDbClient | None:
    """Shared TMDb client, None when no credentials were configured."""
    return getattr(request.app.state, "tmdb", None)


def get_tmdb_client(
    client: TMDbClient | None = Depends(get_optional_tmdb_client),
) -> TMDbClient:
    if client is None:
        raise availability_unavailable()
    return client


async def get_current_user(
    x_user_email: Annotated[str | None, Header(alias=USER_EMAIL_HEADER)] = None,
    directory: UserDirectory = Depends(get_user_directory),
) -> UserRecord:
    """Look up the authenticated caller.

    The email header is set by the authenticating proxy in front of this
    service. A caller without a stored record is served with no region and no
    services.
    """
    email = (x_user_email or "").strip().lower()
    if not email:
        raise unauthorized()

    try:
        user = await directory.get_user_by_email(email)
    except SQLAlchemyError as exc:
        logger.exception("Failed to fetch user record for %s", email)
        raise user_lookup_failed() from exc
    if user is None:
        return UserRecord(email=email)
    return user


def get_availability_resolver(
    cache: CacheService = Depends(get_cache_service),
    tmdb: TMDbClient = Depends(get_tmdb_client),
) -> AvailabilityResolver:
    return AvailabilityResolver(cache, tmdb)


def get_batch_orchestrator(
    resolver: AvailabilityResolver = Depends(get_availability_resolver),
    settings: Settings = Depends(get_app_settings),
) -> BatchOrchestrator:
    """Create BatchOrchestrator with the configured limits."""
    return BatchOrchestrator(
        resolver,
        max_items=settings.availability_batch_max_items,
        concurrency=settings.availability_batch_concurrency,
    )


def get_title_search_service(
    cache: CacheService = Depends(get_cache_service),
    tmdb: TMDbClient | None = Depends(get_optional_tmdb_client),
) -> TitleSearchService:
    if tmdb is None:
        raise availability_unavailable("search")
    return TitleSearchService(cache, tmdb)
