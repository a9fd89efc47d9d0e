"""Shared error handling utilities for API endpoints.

Standardized HTTPException builders so every endpoint reports the same
failure with the same status code and detail text.
"""

from fastapi import HTTPException, status


def bad_request(detail: str) -> HTTPException:
    """Create an HTTP 400 exception for input rejected before any I/O.

    Args:
        detail: Human-readable reason, e.g. "invalid id".

    Returns:
        An HTTPException with 400 status.
    """
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def unauthorized() -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="unauthorized")


def availability_unavailable(feature: str = "availability") -> HTTPException:
    """Create an HTTP 503 exception for when no TMDb client is configured."""
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"{feature} unavailable",
    )


def upstream_failed(what: str) -> HTTPException:
    """Create an HTTP 502 exception for a failed TMDb call.

    Args:
        what: The upstream operation, e.g. "search".
    """
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=f"upstream {what} failed",
    )


def user_lookup_failed() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="failed to fetch user",
    )
