"""User-record lookup consumed by the availability endpoints.

The user store itself belongs to the account/watchlist side of the product;
this module only fixes the shape the availability engine reads from it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, List


@dataclass(frozen=True)
class ServiceSubscription:
    code: str
    active: bool = True
    plan: str | None = None


@dataclass(frozen=True)
class UserRecord:
    email: str
    region: str | None = None
    services: List[ServiceSubscription] = field(default_factory=list)


def active_service_set(services: Iterable[ServiceSubscription]) -> frozenset[str]:
    """Lowercase codes of the subscriptions flagged active."""
    return frozenset(
        svc.code.strip().lower()
        for svc in services
        if svc.active and svc.code and svc.code.strip()
    )


class UserDirectory(ABC):
    """Lookup of the caller's stored region and service subscriptions."""

    @abstractmethod
    async def get_user_by_email(self, email: str) -> UserRecord | None:
        """Return the stored user, or None if no record exists yet."""


__all__ = [
    "ServiceSubscription",
    "UserDirectory",
    "UserRecord",
    "active_service_set",
]
