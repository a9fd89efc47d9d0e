from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from watchlist_notify.persistence import models
from watchlist_notify.services.users import (
    ServiceSubscription,
    UserDirectory,
    UserRecord,
)


def to_user_record(row: models.User) -> UserRecord:
    """Project an ORM user onto the record the availability engine reads."""
    return UserRecord(
        email=row.email,
        region=row.region,
        services=[
            ServiceSubscription(code=svc.code, active=bool(svc.active), plan=svc.plan)
            for svc in row.services
        ],
    )


class UserRepository(UserDirectory):
    """Read-only user lookup backed by the relational user store."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_user_by_email(self, email: str) -> UserRecord | None:
        stmt = (
            select(models.User)
            .where(models.User.email == email.strip().lower())
            .options(selectinload(models.User.services))
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return to_user_record(row)
