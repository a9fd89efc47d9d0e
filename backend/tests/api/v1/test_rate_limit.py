"""Tests for limiter construction and per-app configuration."""

import pytest
from slowapi import Limiter

from watchlist_notify.api.v1.shared.rate_limit import _storage_uri, build_limiter, limiter
from watchlist_notify.core.config import Settings
from watchlist_notify.main import create_app

ALICE = {"X-User-Email": "alice@example.com"}
BATCH_URL = "/api/v1/availability/batch"


def test_storage_uri_uses_valkey_driver():
    assert _storage_uri("redis://cache:6379/0") == "valkey://cache:6379/0"
    assert _storage_uri("rediss://cache:6380/0") == "valkeys://cache:6380/0"
    assert _storage_uri("valkey://cache:6379/0") == "valkey://cache:6379/0"
    assert _storage_uri("cache:6379") == "valkey://cache:6379"


def test_disabled_limiter():
    limiter = build_limiter(Settings(rate_limit_enabled=False))
    assert isinstance(limiter, Limiter)
    assert not limiter.enabled


def test_limiter_without_cache_counts_in_memory():
    limiter = build_limiter(Settings(rate_limit_enabled=True, cache_url="disabled"))
    assert limiter.enabled


def test_create_app_configures_limiter_from_its_settings():
    enabled_app = create_app(Settings(cache_url="disabled", rate_limit_enabled=True))
    assert limiter.enabled
    assert enabled_app.state.limiter is limiter.current

    create_app(Settings(cache_url="disabled", rate_limit_enabled=False))
    assert not limiter.enabled


class TestEnforcedLimits:
    @pytest.fixture()
    def app_settings(self) -> Settings:
        return Settings(
            cache_url="disabled",
            rate_limit_enabled=True,
            otel_enabled=False,
            tmdb_api_key=None,
            default_region=None,
        )

    def test_batch_endpoint_returns_429_past_its_limit(self, api_client, user_directory):
        user_directory.add("alice@example.com", "netflix")
        body = {"items": [{"id": 1, "type": "movie"}]}

        statuses = [
            api_client.post(BATCH_URL, json=body, headers=ALICE).status_code
            for _ in range(21)
        ]

        assert statuses[:20] == [200] * 20
        assert statuses[20] == 429
