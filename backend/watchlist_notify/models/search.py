from __future__ import annotations

from pydantic import BaseModel, Field

from watchlist_notify.services.tmdb_dto import SearchResult as SearchResultDTO


class SearchResult(BaseModel):
    tmdb_id: int
    title: str
    year: int = Field(0, description="Release or first-air year, 0 when unknown.")
    type: str
    poster_url: str | None = None
    poster_path: str | None = None

    @classmethod
    def from_dto(cls, dto: SearchResultDTO) -> "SearchResult":
        return cls(
            tmdb_id=dto.tmdb_id,
            title=dto.title,
            year=dto.year,
            type=dto.type,
            poster_url=dto.poster_url or None,
            poster_path=dto.poster_path or None,
        )


class SearchResponse(BaseModel):
    results: list[SearchResult] = Field(default_factory=list)
    page: int
    total_pages: int
    query: str = Field(..., description="Original query string.")
    type: str
    include_adult: bool
    language: str
    region: str
