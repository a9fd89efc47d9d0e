"""
Streaming availability resolution for a single title.

Answers "which of the caller's active services offer this title in this
region, and under which access tiers" using the cached TMDb provider listing,
falling back to TMDb on a miss and writing the listing back best-effort.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Protocol

from watchlist_notify.core.config import FALLBACK_REGION
from watchlist_notify.core.metrics import record_resolution
from watchlist_notify.services.cache import CacheError, CacheService
from watchlist_notify.services.cache_keys import ProvidersKey
from watchlist_notify.services.service_codes import (
    display_name_for_code,
    map_provider_name_to_code,
)
from watchlist_notify.services.tmdb_dto import (
    Provider,
    ProvidersResponse,
    RegionProviders,
)
from watchlist_notify.services.tmdb_errors import ProviderSourceError

logger = logging.getLogger(__name__)


class MediaType(str, enum.Enum):
    MOVIE = "movie"
    TV = "tv"


class AccessTier(str, enum.Enum):
    SUBSCRIPTION = "subscription"
    FREE = "free"
    ADS = "ads"


# Merge and output order for access tiers.
ACCESS_ORDER: tuple[AccessTier, ...] = (
    AccessTier.SUBSCRIPTION,
    AccessTier.FREE,
    AccessTier.ADS,
)


class AvailabilityValidationError(ValueError):
    """Raised for bad title ids or media types, before any I/O happens."""


class ProviderSource(Protocol):
    async def get_providers(self, title_id: int, media_type: str) -> ProvidersResponse:
        ...


# =============================================================================
# Input validation and region resolution
# =============================================================================


def parse_media_type(raw: str | None) -> str:
    value = (raw or "").strip().lower()
    try:
        return MediaType(value).value
    except ValueError:
        raise AvailabilityValidationError("invalid type; must be movie or tv") from None


def validate_title_id(raw: Any) -> int:
    if isinstance(raw, bool):
        raise AvailabilityValidationError("invalid id")
    try:
        title_id = int(raw)
    except (TypeError, ValueError):
        raise AvailabilityValidationError("invalid id") from None
    if title_id <= 0 or (isinstance(raw, float) and raw != title_id):
        raise AvailabilityValidationError("invalid id")
    return title_id


def _valid_region(value: str) -> bool:
    return len(value) == 2 and value.isascii() and value.isalpha()


def resolve_region(
    requested: str | None,
    user_region: str | None,
    default_region: str | None,
) -> str:
    """Pick the first non-blank of request, stored user region, server default.

    The chosen value is uppercased; anything that is not two letters is
    replaced by the hard-coded fallback rather than by the next candidate.
    """
    for candidate in (requested, user_region, default_region):
        value = (candidate or "").strip()
        if value:
            break
    else:
        return FALLBACK_REGION

    value = value.upper()
    return value if _valid_region(value) else FALLBACK_REGION


def apply_region_override(region: str, override: str | None) -> str:
    """Let a batch body region replace the resolved one when it is well formed."""
    value = (override or "").strip().upper()
    return value if _valid_region(value) else region


# =============================================================================
# Results
# =============================================================================


@dataclass
class ProviderMatch:
    """Request-scoped accumulator for one service code."""

    code: str
    name: str
    logo_path: str
    access: set[AccessTier] = field(default_factory=set)


@dataclass(frozen=True)
class ProviderAvailability:
    code: str
    name: str
    logo_path: str
    link: str
    access: List[str]


@dataclass(frozen=True)
class AvailabilityResult:
    providers: List[ProviderAvailability]
    unmatched_user_services: List[str]
    cache_status: str = "miss"
    degraded: bool = False

    @classmethod
    def empty(
        cls,
        active: Iterable[str],
        *,
        cache_status: str = "miss",
        degraded: bool = False,
    ) -> "AvailabilityResult":
        return cls(
            providers=[],
            unmatched_user_services=sorted(active),
            cache_status=cache_status,
            degraded=degraded,
        )


def merge_region_providers(
    listing: RegionProviders | None,
    active: frozenset[str] | set[str],
    *,
    cache_status: str = "miss",
) -> AvailabilityResult:
    """Intersect one region's provider buckets with the caller's active services."""
    if listing is None:
        return AvailabilityResult.empty(active, cache_status=cache_status)

    buckets: dict[AccessTier, list[Provider]] = {
        AccessTier.SUBSCRIPTION: listing.flatrate,
        AccessTier.FREE: listing.free,
        AccessTier.ADS: listing.ads,
    }
    matches: dict[str, ProviderMatch] = {}
    for tier in ACCESS_ORDER:
        for provider in buckets[tier]:
            code, found = map_provider_name_to_code(provider.provider_name)
            if not found:
                continue
            code = code.lower()
            if code not in active:
                continue

            match = matches.get(code)
            if match is None:
                match = ProviderMatch(
                    code=code,
                    name=display_name_for_code(code),
                    logo_path=provider.logo_path,
                )
                matches[code] = match
            elif not match.logo_path:
                match.logo_path = provider.logo_path
            match.access.add(tier)

    providers = []
    for match in sorted(matches.values(), key=lambda m: (m.name, m.code)):
        access = [tier.value for tier in ACCESS_ORDER if tier in match.access]
        providers.append(
            ProviderAvailability(
                code=match.code,
                name=match.name,
                logo_path=match.logo_path,
                link=listing.link,
                access=access or [AccessTier.SUBSCRIPTION.value],
            )
        )

    unmatched = sorted(code for code in active if code not in matches)
    return AvailabilityResult(
        providers=providers,
        unmatched_user_services=unmatched,
        cache_status=cache_status,
    )


# =============================================================================
# Resolver
# =============================================================================


class AvailabilityResolver:
    """Cache-aside resolution of one title against the caller's services."""

    def __init__(self, cache: CacheService, source: ProviderSource) -> None:
        self._cache = cache
        self._source = source

    async def load_listing(
        self, title_id: int, media_type: str
    ) -> tuple[ProvidersResponse, str]:
        """Return the provider listing and how the cache answered.

        Cache errors are logged and treated as a miss. A failed write-through
        is logged and ignored.

        Raises:
            ProviderSourceError: when the cache misses and TMDb fails
        """
        key = ProvidersKey(id=title_id, type=media_type)
        cache_status = "miss"
        try:
            cached = await self._cache.get_providers(key)
        except CacheError as exc:
            logger.warning("cache: providers lookup failed for %s: %s", key, exc)
            cached = None
            cache_status = "error"

        if cached is not None:
            return cached, "hit"

        listing = await self._source.get_providers(title_id, media_type)

        try:
            await self._cache.set_providers(key, listing)
        except CacheError as exc:
            logger.warning("cache: providers set failed for %s: %s", key, exc)

        return listing, cache_status

    async def resolve(
        self,
        title_id: Any,
        media_type: str,
        region: str,
        active: frozenset[str],
    ) -> AvailabilityResult:
        """Resolve one title; upstream failures propagate as ProviderSourceError."""
        title_id = validate_title_id(title_id)
        media_type = parse_media_type(media_type)

        listing, cache_status = await self.load_listing(title_id, media_type)
        return merge_region_providers(
            listing.results.get(region), active, cache_status=cache_status
        )

    async def resolve_or_degrade(
        self,
        title_id: Any,
        media_type: str,
        region: str,
        active: frozenset[str],
        *,
        mode: str = "single",
    ) -> AvailabilityResult:
        """Resolve one title, turning an upstream failure into an empty result."""
        try:
            result = await self.resolve(title_id, media_type, region, active)
        except ProviderSourceError as exc:
            logger.warning(
                "tmdb: providers fetch failed for %s_%s: %s", media_type, title_id, exc
            )
            record_resolution(mode, "degraded")
            return AvailabilityResult.empty(active, degraded=True)

        record_resolution(mode, "resolved")
        return result


__all__ = [
    "ACCESS_ORDER",
    "AccessTier",
    "AvailabilityResolver",
    "AvailabilityResult",
    "AvailabilityValidationError",
    "MediaType",
    "ProviderAvailability",
    "ProviderMatch",
    "ProviderSource",
    "apply_region_override",
    "merge_region_providers",
    "parse_media_type",
    "resolve_region",
    "validate_title_id",
]
