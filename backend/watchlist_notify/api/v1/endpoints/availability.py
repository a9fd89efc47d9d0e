"""
Availability endpoints.

Answer which of the caller's active streaming services offer a title in a
region, for one title or for a batch of up to several hundred.
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, Request, Response

from watchlist_notify.api.v1.shared.constants import (
    CACHE_STATUS_HEADER,
    RATE_LIMIT_BATCH,
    RATE_LIMIT_STANDARD,
    UPSTREAM_STATUS_HEADER,
)
from watchlist_notify.api.v1.shared.dependencies import (
    get_app_settings,
    get_availability_resolver,
    get_batch_orchestrator,
    get_current_user,
)
from watchlist_notify.api.v1.shared.errors import bad_request
from watchlist_notify.api.v1.shared.rate_limit import limiter
from watchlist_notify.core.config import Settings
from watchlist_notify.models.availability import (
    AvailabilityResponse,
    BatchAvailabilityRequest,
    BatchAvailabilityResponse,
)
from watchlist_notify.services.availability import (
    AvailabilityResolver,
    AvailabilityValidationError,
    apply_region_override,
    parse_media_type,
    resolve_region,
    validate_title_id,
)
from watchlist_notify.services.availability_batch import (
    BatchItem,
    BatchOrchestrator,
    BatchValidationError,
    validate_batch,
)
from watchlist_notify.services.users import UserRecord, active_service_set

router = APIRouter()


# Validation runs as dependencies declared ahead of the user lookup so bad
# input is rejected before any database or upstream call.


def parse_title(
    title_id: Annotated[str, Path(description="TMDb id of the movie or show.")],
    media_type: Annotated[
        str | None, Query(alias="type", description="'movie' or 'tv'.")
    ] = None,
) -> BatchItem:
    try:
        return BatchItem(id=validate_title_id(title_id), type=parse_media_type(media_type))
    except AvailabilityValidationError as exc:
        raise bad_request(str(exc)) from exc


@dataclass(frozen=True)
class ParsedBatch:
    items: list[BatchItem]
    region_override: str | None


def parse_batch(
    body: BatchAvailabilityRequest,
    settings: Settings = Depends(get_app_settings),
) -> ParsedBatch:
    try:
        items = validate_batch(body.items, settings.availability_batch_max_items)
    except BatchValidationError as exc:
        raise bad_request(str(exc)) from exc
    return ParsedBatch(items=items, region_override=body.region)


@router.post(
    "/batch",
    response_model=BatchAvailabilityResponse,
    summary="Get availability for many titles",
    description="Resolve availability for up to the configured maximum of titles at once. "
    "A title whose upstream lookup fails is reported with no providers.",
)
@limiter.limit(RATE_LIMIT_BATCH.value)
async def availability_batch(
    request: Request,
    batch: ParsedBatch = Depends(parse_batch),
    region: Annotated[
        str | None, Query(description="Two-letter region; the body region wins.")
    ] = None,
    orchestrator: BatchOrchestrator = Depends(get_batch_orchestrator),
    user: UserRecord = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
) -> BatchAvailabilityResponse:
    """Resolve every title in the batch for the caller's active services."""
    resolved_region = apply_region_override(
        resolve_region(region, user.region, settings.default_region),
        batch.region_override,
    )
    active = active_service_set(user.services)

    results = await orchestrator.resolve_batch(batch.items, resolved_region, active)
    return BatchAvailabilityResponse.from_results(resolved_region, results.items())


@router.get(
    "/{title_id}",
    response_model=AvailabilityResponse,
    summary="Get availability for one title",
)
@limiter.limit(RATE_LIMIT_STANDARD.value)
async def availability(
    request: Request,
    response: Response,
    title: BatchItem = Depends(parse_title),
    region: Annotated[
        str | None,
        Query(description="Two-letter region; defaults to the caller's stored region."),
    ] = None,
    resolver: AvailabilityResolver = Depends(get_availability_resolver),
    user: UserRecord = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
) -> AvailabilityResponse:
    """Resolve one title for the caller's active services."""
    resolved_region = resolve_region(region, user.region, settings.default_region)
    active = active_service_set(user.services)

    result = await resolver.resolve_or_degrade(
        title.id, title.type, resolved_region, active
    )
    response.headers[CACHE_STATUS_HEADER] = result.cache_status
    if result.degraded:
        response.headers[UPSTREAM_STATUS_HEADER] = "degraded"
    return AvailabilityResponse.from_result(resolved_region, result)
