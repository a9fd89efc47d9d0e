"""Shared constants for API endpoints."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimit:
    """Rate limit configuration for endpoints."""

    value: str
    """The rate limit string (e.g., '60/minute')."""


RATE_LIMIT_STANDARD = RateLimit("120/minute")
"""Rate limit for single-title reads and search."""

RATE_LIMIT_BATCH = RateLimit("20/minute")
"""Rate limit for batch availability (up to 500 upstream lookups each)."""

CACHE_STATUS_HEADER = "X-Cache-Status"
UPSTREAM_STATUS_HEADER = "X-Upstream-Status"
USER_EMAIL_HEADER = "X-User-Email"
