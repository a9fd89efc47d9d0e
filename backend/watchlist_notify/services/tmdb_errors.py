"""TMDb-specific exception definitions."""

from __future__ import annotations


class ProviderSourceError(Exception):
    """Raised for any failed TMDb call: transport error, timeout, non-2xx or bad body."""


class ProviderSourceConfigError(Exception):
    """Raised when the TMDb client is constructed without credentials."""


__all__ = [
    "ProviderSourceError",
    "ProviderSourceConfigError",
]
