"""Circuit breaker helper for cache operations."""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)
T = TypeVar("T")


class CacheError(Exception):
    """A cache backend failure. Never means "no data"; see CacheService.get_json."""


class CircuitOpenError(CacheError):
    """Raised without touching the backend while the breaker is open."""


class CircuitBreaker:
    """Fail-fast guard around backend calls.

    After a failure the breaker stays open for ``timeout_seconds``; calls made
    in that window raise CircuitOpenError immediately instead of waiting on a
    dead connection. The next successful call closes it again.
    """

    def __init__(self, timeout_seconds: float) -> None:
        self._timeout = timeout_seconds
        self._open_until = 0.0

    def is_open(self) -> bool:
        """Check if the circuit breaker is currently open."""
        return time.monotonic() < self._open_until

    def open(self) -> None:
        """Open the circuit breaker for the configured timeout."""
        self._open_until = time.monotonic() + self._timeout

    def close(self) -> None:
        """Close the circuit breaker immediately."""
        self._open_until = 0.0

    def protect(
        self, func: Callable[..., Awaitable[T]]
    ) -> Callable[..., Awaitable[T]]:
        """Decorator translating backend exceptions into CacheError."""

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            if self.is_open():
                raise CircuitOpenError(f"cache circuit open, skipping {func.__name__}")
            try:
                result = await func(*args, **kwargs)
            except CacheError:
                raise
            except Exception as exc:
                logger.warning(
                    "Cache circuit breaker opened for %s", func.__name__, exc_info=exc
                )
                self.open()
                raise CacheError(f"{func.__name__} failed: {exc}") from exc
            self.close()
            return result

        return wrapper


__all__ = ["CacheError", "CircuitBreaker", "CircuitOpenError"]
