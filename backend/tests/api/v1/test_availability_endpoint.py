"""Tests for GET /api/v1/availability/{id}."""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from watchlist_notify.api.v1.shared.dependencies import get_optional_tmdb_client
from watchlist_notify.persistence.dependencies import get_user_directory

from tests.tmdb_fakes import FakeUserDirectory, listing, provider

ALICE = {"X-User-Email": "alice@example.com"}


def _seed(fake_tmdb, user_directory, *, region=None):
    user_directory.add("alice@example.com", "netflix", "hulu", region=region, inactive=("max",))
    fake_tmdb.add(
        "movie",
        123,
        listing(
            123,
            flatrate=[provider("Netflix", "/n.png"), provider("Max", "/m.png")],
            ads=[provider("Netflix", "/n.png")],
            link="https://www.themoviedb.org/movie/123/watch?locale=US",
        ),
    )


def test_availability_returns_matched_providers(api_client, fake_tmdb, user_directory):
    _seed(fake_tmdb, user_directory)

    response = api_client.get("/api/v1/availability/123?type=movie", headers=ALICE)

    assert response.status_code == 200
    assert response.headers["X-Cache-Status"] == "miss"
    assert "X-Upstream-Status" not in response.headers
    assert response.json() == {
        "region": "US",
        "providers": [
            {
                "code": "netflix",
                "name": "Netflix",
                "logo": "/n.png",
                "link": "https://www.themoviedb.org/movie/123/watch?locale=US",
                "access": ["subscription", "ads"],
            }
        ],
        "unmatched_user_services": ["hulu"],
    }


def test_availability_second_request_is_served_from_cache(
    api_client, fake_tmdb, user_directory
):
    _seed(fake_tmdb, user_directory)

    api_client.get("/api/v1/availability/123?type=movie", headers=ALICE)
    response = api_client.get("/api/v1/availability/123?type=movie", headers=ALICE)

    assert response.headers["X-Cache-Status"] == "hit"
    assert fake_tmdb.provider_calls == [("movie", 123)]


def test_availability_uses_stored_user_region(api_client, fake_tmdb, user_directory):
    user_directory.add("alice@example.com", "netflix", region="gb")
    fake_tmdb.add("tv", 9, listing(9, region="GB", flatrate=[provider("Netflix")]))

    response = api_client.get("/api/v1/availability/9?type=tv", headers=ALICE)

    body = response.json()
    assert body["region"] == "GB"
    assert [p["code"] for p in body["providers"]] == ["netflix"]


def test_availability_query_region_wins(api_client, fake_tmdb, user_directory):
    user_directory.add("alice@example.com", "netflix", region="GB")
    fake_tmdb.add("tv", 9, listing(9, region="GB", flatrate=[provider("Netflix")]))

    response = api_client.get("/api/v1/availability/9?type=tv&region=de", headers=ALICE)

    body = response.json()
    assert body["region"] == "DE"
    assert body["providers"] == []
    assert body["unmatched_user_services"] == ["netflix"]


def test_availability_malformed_region_falls_back_to_us(api_client, user_directory):
    user_directory.add("alice@example.com", "netflix", region="GB")

    response = api_client.get(
        "/api/v1/availability/9?type=tv&region=narnia", headers=ALICE
    )

    assert response.json()["region"] == "US"


def test_availability_invalid_id_rejected_before_lookup(
    api_client, fake_tmdb, user_directory
):
    response = api_client.get("/api/v1/availability/abc?type=movie", headers=ALICE)

    assert response.status_code == 400
    assert response.json()["detail"] == "invalid id"
    assert user_directory.lookups == []
    assert fake_tmdb.provider_calls == []


def test_availability_invalid_type_rejected(api_client, fake_tmdb):
    for query in ("?type=book", ""):
        response = api_client.get(f"/api/v1/availability/5{query}", headers=ALICE)
        assert response.status_code == 400
        assert response.json()["detail"] == "invalid type; must be movie or tv"
    assert fake_tmdb.provider_calls == []


def test_availability_requires_caller_identity(api_client):
    response = api_client.get("/api/v1/availability/5?type=movie")
    assert response.status_code == 401


def test_availability_unknown_user_has_no_services(api_client, fake_tmdb):
    fake_tmdb.add("movie", 5, listing(5, flatrate=[provider("Netflix")]))

    response = api_client.get(
        "/api/v1/availability/5?type=movie", headers={"X-User-Email": "new@example.com"}
    )

    assert response.status_code == 200
    assert response.json() == {
        "region": "US",
        "providers": [],
        "unmatched_user_services": [],
    }


def test_availability_upstream_failure_degrades(api_client, fake_tmdb, user_directory):
    _seed(fake_tmdb, user_directory)
    fake_tmdb.failing.add(("movie", 123))

    response = api_client.get("/api/v1/availability/123?type=movie", headers=ALICE)

    assert response.status_code == 200
    assert response.headers["X-Upstream-Status"] == "degraded"
    assert response.json()["providers"] == []
    assert response.json()["unmatched_user_services"] == ["hulu", "netflix"]


def test_availability_unavailable_without_tmdb(api_client):
    api_client.app.dependency_overrides[get_optional_tmdb_client] = lambda: None

    response = api_client.get("/api/v1/availability/5?type=movie", headers=ALICE)

    assert response.status_code == 503
    assert response.json()["detail"] == "availability unavailable"


def test_availability_user_store_failure(api_client):
    class BrokenDirectory(FakeUserDirectory):
        async def get_user_by_email(self, email):
            raise SQLAlchemyError("connection refused")

    api_client.app.dependency_overrides[get_user_directory] = BrokenDirectory

    response = api_client.get("/api/v1/availability/5?type=movie", headers=ALICE)

    assert response.status_code == 500
    assert response.json()["detail"] == "failed to fetch user"
