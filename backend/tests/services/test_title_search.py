"""Tests for cache-aside title search."""

import pytest

from watchlist_notify.services.cache_keys import SearchKey
from watchlist_notify.services.title_search import (
    SearchValidationError,
    TitleSearchService,
)
from watchlist_notify.services.tmdb_errors import ProviderSourceError

from tests.tmdb_fakes import search_page


@pytest.fixture
def service(cache_service, fake_tmdb) -> TitleSearchService:
    return TitleSearchService(cache_service, fake_tmdb)


@pytest.mark.asyncio
async def test_search_miss_then_hit(service, fake_tmdb):
    fake_tmdb.search_pages["dune"] = search_page("Dune", total_pages=2)
    key = SearchKey(query="dune", region="US")

    first = await service.search(key)
    second = await service.search(SearchKey(query=" DUNE ", region="us"))

    assert first.cache_status == "miss"
    assert second.cache_status == "hit"
    assert second.page == first.page
    assert len(fake_tmdb.search_calls) == 1
    assert fake_tmdb.search_calls[0]["region"] == "US"


@pytest.mark.asyncio
async def test_search_passes_filters_upstream(service, fake_tmdb):
    await service.search(
        SearchKey(query="dark", page=3, include_adult=True, language="de-DE", type="tv")
    )

    assert fake_tmdb.search_calls == [
        {
            "query": "dark",
            "page": 3,
            "include_adult": True,
            "language": "de-DE",
            "region": None,
            "media_type": "tv",
        }
    ]


@pytest.mark.asyncio
async def test_search_cache_error_is_a_miss(service, fake_tmdb, fake_valkey):
    fake_valkey.should_fail = True
    fake_tmdb.search_pages["dune"] = search_page("Dune")

    outcome = await service.search(SearchKey(query="dune"))

    assert outcome.cache_status == "error"
    assert outcome.page.results[0].title == "Dune"


@pytest.mark.asyncio
async def test_search_upstream_failure_propagates(service, fake_tmdb):
    fake_tmdb.search_fails = True
    with pytest.raises(ProviderSourceError):
        await service.search(SearchKey(query="dune"))


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "key", [SearchKey(query="   "), SearchKey(query="x", page=0), SearchKey(query="x", page=1001)]
)
async def test_search_validation(service, fake_tmdb, key):
    with pytest.raises(SearchValidationError):
        await service.search(key)
    assert fake_tmdb.search_calls == []
