from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from watchlist_notify.core.config import Settings
from watchlist_notify.core.metrics import observe_tmdb_request
from watchlist_notify.services.tmdb_dto import ProvidersResponse, SearchPage
from watchlist_notify.services.tmdb_errors import (
    ProviderSourceConfigError,
    ProviderSourceError,
)
from watchlist_notify.services.tmdb_mapping import (
    MEDIA_TYPES,
    map_providers_response,
    map_search_page,
)

logger = logging.getLogger(__name__)

__all__ = [
    "TMDbClient",
    "looks_like_bearer",
    "resolve_credentials",
    "ProviderSourceError",
    "ProviderSourceConfigError",
]


def looks_like_bearer(value: str | None) -> bool:
    """TMDb v4 tokens are long JWT-like strings with at least two dots."""
    if not value:
        return False
    return value.count(".") >= 2 and len(value) > 50


def resolve_credentials(
    api_key: str | None, bearer_token: str | None
) -> tuple[str, str]:
    """Split configured credentials into (v3 api key, v4 bearer token).

    An explicit bearer token wins; otherwise a JWT-looking api key is promoted
    to the bearer slot.
    """
    key = (api_key or "").strip()
    bearer = (bearer_token or "").strip()
    if not bearer and looks_like_bearer(key):
        bearer, key = key, ""
    return key, bearer


class TMDbClient:
    """Async TMDb v3 client for watch providers and title search.

    One instance is shared by every request; httpx.AsyncClient is safe for
    concurrent use and enforces the per-call timeout.
    """

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key, bearer = resolve_credentials(
            settings.tmdb_api_key, settings.tmdb_bearer_token
        )
        if not self._api_key and not bearer:
            raise ProviderSourceConfigError(
                "TMDb credentials missing (set TMDB_API_KEY for v3 or TMDB_BEARER_TOKEN for v4)"
            )

        self._base_url = settings.tmdb_base_url.rstrip("/")
        self._image_base_url = settings.tmdb_image_base_url
        self._headers = {
            "Accept": "application/json",
            "User-Agent": "watchlist-notify/0.1",
        }
        if bearer:
            self._headers["Authorization"] = f"Bearer {bearer}"

        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=settings.tmdb_timeout_seconds
        )

    async def __aenter__(self) -> "TMDbClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def get_providers(self, title_id: int, media_type: str) -> ProvidersResponse:
        """Fetch the per-region watch-provider listing for one title.

        Raises:
            ValueError: for an unsupported media type
            ProviderSourceError: for any upstream or transport failure
        """
        if media_type not in MEDIA_TYPES:
            raise ValueError(f"unsupported media type '{media_type}'")

        payload = await self._get_json(
            "providers", f"/{media_type}/{int(title_id)}/watch/providers", {}
        )
        try:
            return map_providers_response(payload)
        except (TypeError, ValueError) as exc:
            raise ProviderSourceError(
                f"TMDb providers payload for {media_type}_{title_id} is malformed"
            ) from exc

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
        """Search movies or TV shows by title. Region only applies to movies."""
        if media_type not in MEDIA_TYPES:
            raise ValueError(f"unsupported media type '{media_type}'")

        params: dict[str, Any] = {
            "query": query,
            "include_adult": "true" if include_adult else "false",
        }
        if page > 0:
            params["page"] = page
        if language:
            params["language"] = language
        if region and media_type == "movie":
            params["region"] = region

        payload = await self._get_json(f"search_{media_type}", f"/search/{media_type}", params)
        try:
            return map_search_page(payload, media_type, self._image_base_url)
        except (TypeError, ValueError) as exc:
            raise ProviderSourceError("TMDb search payload is malformed") from exc

    async def _get_json(
        self, endpoint: str, path: str, params: dict[str, Any]
    ) -> Any:
        if self._api_key:
            params = {**params, "api_key": self._api_key}

        start = time.perf_counter()
        try:
            response = await self._client.get(
                f"{self._base_url}{path}", params=params, headers=self._headers
            )
        except httpx.TimeoutException as exc:
            observe_tmdb_request(endpoint, "timeout", time.perf_counter() - start)
            raise ProviderSourceError(f"TMDb {endpoint} request timed out") from exc
        except httpx.HTTPError as exc:
            observe_tmdb_request(endpoint, "error", time.perf_counter() - start)
            raise ProviderSourceError(f"TMDb {endpoint} request failed: {exc}") from exc

        duration = time.perf_counter() - start
        if not response.is_success:
            observe_tmdb_request(endpoint, f"http_{response.status_code}", duration)
            raise ProviderSourceError(
                f"TMDb {endpoint} failed: {response.status_code}"
            )

        try:
            payload = response.json()
        except (TypeError, ValueError) as exc:
            observe_tmdb_request(endpoint, "bad_payload", duration)
            raise ProviderSourceError(f"TMDb {endpoint} returned invalid JSON") from exc

        observe_tmdb_request(endpoint, "success", duration)
        return payload
