"""Shared utilities for API v1 endpoints.

This package provides common utilities, constants, and helpers used across
multiple endpoint modules.
"""

from watchlist_notify.api.v1.shared.constants import (
    CACHE_STATUS_HEADER,
    RATE_LIMIT_BATCH,
    RATE_LIMIT_STANDARD,
    UPSTREAM_STATUS_HEADER,
    USER_EMAIL_HEADER,
    RateLimit,
)
from watchlist_notify.api.v1.shared.errors import (
    availability_unavailable,
    bad_request,
    unauthorized,
    upstream_failed,
    user_lookup_failed,
)

__all__ = [
    # Rate limiting
    "RateLimit",
    "RATE_LIMIT_STANDARD",
    "RATE_LIMIT_BATCH",
    # Headers
    "CACHE_STATUS_HEADER",
    "UPSTREAM_STATUS_HEADER",
    "USER_EMAIL_HEADER",
    # Error handling
    "availability_unavailable",
    "bad_request",
    "unauthorized",
    "upstream_failed",
    "user_lookup_failed",
]
