from __future__ import annotations

from typing import Iterable

from pydantic import BaseModel, Field

from watchlist_notify.services.availability import (
    AvailabilityResult,
    ProviderAvailability,
)


class ProviderOut(BaseModel):
    code: str = Field(..., description="Stable internal service code, e.g. 'netflix'.")
    name: str = Field(..., description="Display name of the service.")
    logo: str | None = Field(None, description="TMDb logo path.")
    link: str | None = Field(None, description="TMDb watch page for the title and region.")
    access: list[str] = Field(
        ..., description="Access tiers in order: subscription, free, ads."
    )

    @classmethod
    def from_dto(cls, dto: ProviderAvailability) -> "ProviderOut":
        return cls(
            code=dto.code,
            name=dto.name,
            logo=dto.logo_path or None,
            link=dto.link or None,
            access=list(dto.access),
        )


class AvailabilityItem(BaseModel):
    providers: list[ProviderOut] = Field(default_factory=list)
    unmatched_user_services: list[str] = Field(
        default_factory=list,
        description="Active user services that do not offer the title in the region.",
    )

    @classmethod
    def from_result(cls, result: AvailabilityResult) -> "AvailabilityItem":
        return cls(
            providers=[ProviderOut.from_dto(p) for p in result.providers],
            unmatched_user_services=list(result.unmatched_user_services),
        )


class AvailabilityResponse(BaseModel):
    region: str
    providers: list[ProviderOut] = Field(default_factory=list)
    unmatched_user_services: list[str] = Field(default_factory=list)

    @classmethod
    def from_result(
        cls, region: str, result: AvailabilityResult
    ) -> "AvailabilityResponse":
        return cls(
            region=region,
            providers=[ProviderOut.from_dto(p) for p in result.providers],
            unmatched_user_services=list(result.unmatched_user_services),
        )


class BatchItemIn(BaseModel):
    id: int
    type: str = Field(..., description="'movie' or 'tv'.")


class BatchAvailabilityRequest(BaseModel):
    items: list[BatchItemIn]
    region: str | None = Field(
        None, description="Optional two-letter region overriding the caller's default."
    )


class BatchAvailabilityResponse(BaseModel):
    region: str
    results: dict[str, AvailabilityItem] = Field(
        default_factory=dict, description="Keyed by '<type>_<id>', e.g. 'movie_123'."
    )

    @classmethod
    def from_results(
        cls, region: str, results: Iterable[tuple[str, AvailabilityResult]]
    ) -> "BatchAvailabilityResponse":
        return cls(
            region=region,
            results={key: AvailabilityItem.from_result(r) for key, r in results},
        )
