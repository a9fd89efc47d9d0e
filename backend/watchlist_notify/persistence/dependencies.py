from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from watchlist_notify.core.database import get_session
from watchlist_notify.persistence.repositories import UserRepository
from watchlist_notify.services.users import UserDirectory


async def get_user_directory(
    session: AsyncSession = Depends(get_session),
) -> UserDirectory:
    """FastAPI dependency that yields the user lookup."""
    return UserRepository(session)
