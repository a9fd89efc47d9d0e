from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

# watchlist_notify.main builds a default app from the environment at import,
# so the test environment must be in place before anything is imported.
os.environ["REDIS_URL"] = "disabled"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["OTEL_ENABLED"] = "false"
os.environ["TMDB_API_KEY"] = ""
os.environ["TMDB_BEARER_TOKEN"] = ""
os.environ.pop("TMDB_REGION", None)
os.environ.pop("DEFAULT_REGION", None)

from watchlist_notify.api.v1.shared.dependencies import (  # noqa: E402
    get_optional_tmdb_client,
)
from watchlist_notify.core.config import Settings  # noqa: E402
from watchlist_notify.main import create_app  # noqa: E402
from watchlist_notify.persistence.dependencies import get_user_directory  # noqa: E402
from watchlist_notify.services.cache import (  # noqa: E402
    CacheService,
    TTLConfig,
    ValkeyCacheService,
    get_cache_service,
)

from tests.tmdb_fakes import FakeTMDb, FakeUserDirectory, FakeValkey  # noqa: E402


@pytest.fixture()
def fake_valkey() -> FakeValkey:
    return FakeValkey()


@pytest.fixture()
def ttl_config() -> TTLConfig:
    return TTLConfig(search_ttl=1800, providers_ttl=43200)


@pytest.fixture()
def cache_service(fake_valkey: FakeValkey, ttl_config: TTLConfig) -> CacheService:
    return ValkeyCacheService(fake_valkey, ttl_config, circuit_breaker_timeout=0.0)


@pytest.fixture()
def fake_tmdb() -> FakeTMDb:
    return FakeTMDb()


@pytest.fixture()
def user_directory() -> FakeUserDirectory:
    return FakeUserDirectory()


@pytest.fixture()
def app_settings() -> Settings:
    return Settings(
        cache_url="disabled",
        rate_limit_enabled=False,
        otel_enabled=False,
        tmdb_api_key=None,
        default_region=None,
    )


@pytest.fixture()
def api_client(
    app_settings: Settings,
    cache_service: CacheService,
    fake_tmdb: FakeTMDb,
    user_directory: FakeUserDirectory,
) -> Iterator[TestClient]:
    """Create a test client backed by the fake cache, TMDb and user store."""
    app = create_app(app_settings)
    app.dependency_overrides[get_cache_service] = lambda: cache_service
    app.dependency_overrides[get_optional_tmdb_client] = lambda: fake_tmdb
    app.dependency_overrides[get_user_directory] = lambda: user_directory
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
