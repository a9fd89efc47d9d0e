"""
Cache service for TMDb lookups.

Two implementations share the CacheService contract:
- ValkeyCacheService: JSON documents in Valkey/Redis, guarded by a circuit breaker
- NoopCacheService: always misses and accepts writes, used when the cache is
  disabled or the backend cannot be reached at startup

A miss is reported as ``None``; a backend or decode failure raises
CacheError. Callers must treat the two differently in logs but the same way
in control flow: go to the source of truth.
"""

from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import valkey.asyncio as valkey
from fastapi import Request

from watchlist_notify.core.config import Settings
from watchlist_notify.core.metrics import record_cache_event
from watchlist_notify.services.cache_circuit_breaker import (
    CacheError,
    CircuitBreaker,
    CircuitOpenError,
)
from watchlist_notify.services.cache_keys import ProvidersKey, SearchKey
from watchlist_notify.services.tmdb_dto import ProvidersResponse, SearchPage
from watchlist_notify.services.tmdb_mapping import (
    map_cached_search_page,
    map_providers_response,
    to_payload,
)

logger = logging.getLogger(__name__)

DEFAULT_CACHE_URL = "redis://localhost:6379/0"


# =============================================================================
# TTL Configuration
# =============================================================================


@dataclass(frozen=True)
class TTLConfig:
    """TTL classes for cached upstream data, in seconds (0 disables expiry)."""

    search_ttl: int
    providers_ttl: int

    def __post_init__(self) -> None:
        for name in ("search_ttl", "providers_ttl"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"TTL value for {name} cannot be negative: {value}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "TTLConfig":
        return cls(
            search_ttl=settings.search_cache_ttl_seconds,
            providers_ttl=settings.providers_cache_ttl_seconds,
        )


# =============================================================================
# Cache Service contract
# =============================================================================


class CacheService(ABC):
    """Cache contract: ``get`` returns value or None (miss), raises CacheError."""

    def __init__(self, ttl: TTLConfig) -> None:
        self._ttl = ttl

    @property
    def ttl(self) -> TTLConfig:
        return self._ttl

    @property
    @abstractmethod
    def enabled(self) -> bool:
        """Whether a real backend sits behind this service."""

    @abstractmethod
    async def get_json(self, key: str) -> Any | None:
        """Return the decoded document, or None if the key is absent or expired."""

    @abstractmethod
    async def set_json(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store a JSON-compatible document."""

    async def close(self) -> None:
        """Release backend connections."""

    async def get_providers(self, key: ProvidersKey) -> ProvidersResponse | None:
        """Look up a cached provider listing."""
        try:
            payload = await self.get_json(str(key))
        except CacheError:
            record_cache_event("providers", "error")
            raise
        if payload is None:
            record_cache_event("providers", "miss")
            return None
        try:
            value = map_providers_response(payload)
        except (TypeError, ValueError) as exc:
            record_cache_event("providers", "error")
            raise CacheError(f"undecodable providers entry for {key}") from exc
        record_cache_event("providers", "hit")
        return value

    async def set_providers(self, key: ProvidersKey, value: ProvidersResponse) -> None:
        """Write a provider listing with the long-lived TTL."""
        try:
            await self.set_json(str(key), to_payload(value), self._ttl.providers_ttl)
        except CacheError:
            record_cache_event("providers", "write_error")
            raise
        record_cache_event("providers", "write")

    async def get_search(self, key: SearchKey) -> SearchPage | None:
        """Look up a cached search page."""
        try:
            payload = await self.get_json(str(key))
        except CacheError:
            record_cache_event("search", "error")
            raise
        if payload is None:
            record_cache_event("search", "miss")
            return None
        try:
            value = map_cached_search_page(payload)
        except (TypeError, ValueError) as exc:
            record_cache_event("search", "error")
            raise CacheError(f"undecodable search entry for {key}") from exc
        record_cache_event("search", "hit")
        return value

    async def set_search(self, key: SearchKey, value: SearchPage) -> None:
        """Write a search page with the short-lived TTL."""
        try:
            await self.set_json(str(key), to_payload(value), self._ttl.search_ttl)
        except CacheError:
            record_cache_event("search", "write_error")
            raise
        record_cache_event("search", "write")


# =============================================================================
# Implementations
# =============================================================================


class NoopCacheService(CacheService):
    """Cache stand-in that never stores anything."""

    @property
    def enabled(self) -> bool:
        return False

    async def get_json(self, key: str) -> Any | None:
        return None

    async def set_json(self, key: str, value: Any, ttl_seconds: int) -> None:
        return None


class ValkeyCacheService(CacheService):
    """JSON cache in Valkey with circuit breaker protection."""

    def __init__(
        self,
        client: valkey.Valkey,
        ttl: TTLConfig,
        circuit_breaker_timeout: float = 2.0,
    ) -> None:
        super().__init__(ttl)
        self._client = client
        self._circuit_breaker = CircuitBreaker(circuit_breaker_timeout)

    @property
    def enabled(self) -> bool:
        return True

    async def get_json(self, key: str) -> Any | None:
        raw = await self._get_from_valkey(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise CacheError(f"failed to decode cached JSON for key {key}") from exc

    async def set_json(self, key: str, value: Any, ttl_seconds: int) -> None:
        encoded = json.dumps(value)
        await self._set_to_valkey(key, encoded, ttl_seconds)

    async def close(self) -> None:
        await self._client.aclose()

    async def _get_from_valkey(self, key: str) -> str | None:
        """Get value from Valkey with circuit breaker protection."""

        @self._circuit_breaker.protect
        async def _get() -> str | None:
            return await self._client.get(key)

        return await _get()

    async def _set_to_valkey(self, key: str, value: str, ttl_seconds: int) -> None:
        """Set value in Valkey with circuit breaker protection."""

        @self._circuit_breaker.protect
        async def _set() -> None:
            if ttl_seconds and ttl_seconds > 0:
                await self._client.set(key, value, ex=ttl_seconds)
            else:
                await self._client.set(key, value)

        await _set()


# =============================================================================
# Factory Functions
# =============================================================================


def build_valkey_client(address: str, settings: Settings) -> valkey.Valkey:
    """Build a client from a URL or a bare ``host:port`` address.

    Raises:
        ValueError: if the address cannot be parsed
    """
    options: dict[str, Any] = {
        "encoding": "utf-8",
        "decode_responses": True,
        "socket_connect_timeout": settings.cache_connect_timeout_seconds,
        "socket_timeout": settings.cache_socket_timeout_seconds,
    }
    if "://" in address:
        return valkey.from_url(address, **options)

    host, _, port = address.rpartition(":")
    if not host:
        host, port = address, "6379"
    if not host or not port.isdigit():
        raise ValueError(f"malformed cache address '{address}'")
    return valkey.Valkey(host=host, port=int(port), **options)


async def create_cache_service(settings: Settings) -> CacheService:
    """Connect to the configured cache, degrading to NoopCacheService on any failure."""
    ttl = TTLConfig.from_settings(settings)

    if settings.cache_disabled:
        logger.info("cache: disabled via configuration")
        return NoopCacheService(ttl)

    address = settings.cache_url or DEFAULT_CACHE_URL
    try:
        client = build_valkey_client(address, settings)
    except Exception as exc:
        logger.warning("cache: configuration failed (%s), disabling cache", exc)
        return NoopCacheService(ttl)

    try:
        await asyncio.wait_for(
            client.ping(), timeout=settings.cache_connect_timeout_seconds
        )
    except Exception as exc:
        logger.warning("cache: ping failed (%r), disabling cache", exc)
        try:
            await client.aclose()
        except Exception:
            logger.debug("cache: error closing unreachable client", exc_info=True)
        return NoopCacheService(ttl)

    logger.info("cache: connected")
    return ValkeyCacheService(
        client,
        ttl,
        circuit_breaker_timeout=settings.cache_circuit_breaker_timeout_seconds,
    )


def get_cache_service(request: Request) -> CacheService:
    """FastAPI dependency hook returning the cache created at startup."""
    return request.app.state.cache


__all__ = [
    "CacheError",
    "CacheService",
    "CircuitOpenError",
    "NoopCacheService",
    "TTLConfig",
    "ValkeyCacheService",
    "build_valkey_client",
    "create_cache_service",
    "get_cache_service",
]
