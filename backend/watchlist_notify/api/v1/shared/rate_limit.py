"""Shared rate limiter for API endpoints.

Endpoint routers import ``limiter`` and decorate handlers with
``@limiter.limit(...)`` at import time; ``create_app`` later calls
``limiter.configure(settings)`` so the limits are enforced by a slowapi
Limiter built from the application's own settings. Counters live in the
cache backend when one is configured and in process memory otherwise.
"""

import functools
import logging
from typing import Any, Callable

from slowapi import Limiter
from slowapi.util import get_remote_address

from watchlist_notify.core.config import Settings

logger = logging.getLogger(__name__)

LimitsType = list[str | Callable[..., str]]

_SCHEMES = {"redis": "valkey", "rediss": "valkeys"}


def _storage_uri(cache_url: str) -> str:
    """Point the limiter at the cache, using the valkey driver for redis URLs."""
    scheme, sep, rest = cache_url.partition("://")
    if not sep:
        return f"valkey://{cache_url}"
    return f"{_SCHEMES.get(scheme, scheme)}://{rest}"


def build_limiter(settings: Settings) -> Limiter:
    """Create a Limiter for the given settings (disabled limiter when turned off)."""
    default_limits: LimitsType = [
        f"{settings.rate_limit_requests_per_minute}/minute",
        f"{settings.rate_limit_requests_per_hour}/hour",
    ]

    if not settings.rate_limit_enabled:
        return Limiter(
            key_func=get_remote_address,
            default_limits=default_limits,
            enabled=False,
        )

    if not settings.cache_disabled:
        try:
            return Limiter(
                key_func=get_remote_address,
                storage_uri=_storage_uri(settings.cache_url),
                default_limits=default_limits,
                in_memory_fallback_enabled=True,
                swallow_errors=True,
            )
        except Exception as exc:
            logger.warning("Rate limit storage unavailable (%s), counting in memory", exc)

    return Limiter(
        key_func=get_remote_address,
        default_limits=default_limits,
        swallow_errors=True,
    )


class AppLimiter:
    """Late-bound limiter: routes register limits now, settings arrive later.

    Until ``configure`` runs, the holder wraps a disabled Limiter so routes
    imported outside an application are never throttled.
    """

    def __init__(self) -> None:
        self._limits: list[tuple[str, Callable[..., Any]]] = []
        self._handlers: dict[Callable[..., Any], Callable[..., Any]] = {}
        self.current = build_limiter(Settings(rate_limit_enabled=False))

    @property
    def enabled(self) -> bool:
        return self.current.enabled

    def configure(self, settings: Settings) -> Limiter:
        """Rebuild the Limiter from ``settings`` and re-register every route limit."""
        self.current = build_limiter(settings)
        self._handlers = {
            func: self.current.limit(value)(func) for value, func in self._limits
        }
        logger.info(
            "Rate limiting %s", "enabled" if self.current.enabled else "disabled"
        )
        return self.current

    def limit(self, value: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._limits.append((value, func))
            self._handlers[func] = self.current.limit(value)(func)

            @functools.wraps(func)
            async def wrapper(*args: Any, **kwargs: Any) -> Any:
                return await self._handlers[func](*args, **kwargs)

            return wrapper

        return decorator


limiter = AppLimiter()
