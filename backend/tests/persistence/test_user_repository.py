"""Tests for the user store projection used by availability lookups."""

from __future__ import annotations

from typing import Any

import pytest

from watchlist_notify.persistence import models
from watchlist_notify.persistence.repositories import UserRepository, to_user_record
from watchlist_notify.services.users import ServiceSubscription, active_service_set


class _Result:
    def __init__(self, row: Any) -> None:
        self._row = row

    def scalar_one_or_none(self) -> Any:
        return self._row


class StubSession:
    def __init__(self, row: Any = None) -> None:
        self.row = row
        self.statements: list[Any] = []

    async def execute(self, stmt: Any) -> _Result:
        self.statements.append(stmt)
        return _Result(self.row)


def _user_row() -> models.User:
    return models.User(
        email="alice@example.com",
        region="GB",
        services=[
            models.UserService(code="netflix", active=True, plan="standard"),
            models.UserService(code="Hulu", active=False, plan=None),
        ],
    )


def test_to_user_record_projects_services():
    record = to_user_record(_user_row())

    assert record.email == "alice@example.com"
    assert record.region == "GB"
    assert record.services == [
        ServiceSubscription(code="netflix", active=True, plan="standard"),
        ServiceSubscription(code="Hulu", active=False, plan=None),
    ]


def test_active_service_set_filters_and_lowercases():
    services = [
        ServiceSubscription(code="Netflix"),
        ServiceSubscription(code="hulu", active=False),
        ServiceSubscription(code="  "),
        ServiceSubscription(code="MAX"),
    ]
    assert active_service_set(services) == frozenset({"netflix", "max"})


@pytest.mark.asyncio
async def test_repository_returns_record():
    session = StubSession(_user_row())

    record = await UserRepository(session).get_user_by_email("  Alice@Example.com ")

    assert record is not None
    assert record.region == "GB"
    compiled = str(
        session.statements[0].compile(compile_kwargs={"literal_binds": True})
    )
    assert "'alice@example.com'" in compiled


@pytest.mark.asyncio
async def test_repository_returns_none_for_unknown_user():
    assert await UserRepository(StubSession()).get_user_by_email("bob@example.com") is None
