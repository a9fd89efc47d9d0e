"""Batch availability: fan the resolver out over many titles with bounded concurrency."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Iterable

from watchlist_notify.core.metrics import observe_batch_size
from watchlist_notify.core.telemetry import get_tracer
from watchlist_notify.services.availability import (
    AvailabilityResolver,
    AvailabilityResult,
    AvailabilityValidationError,
    parse_media_type,
    validate_title_id,
)

logger = logging.getLogger(__name__)

MAX_BATCH_ITEMS = 500
MAX_CONCURRENT_RESOLUTIONS = 10


class BatchValidationError(ValueError):
    """Raised for empty, oversized or malformed batches before any work starts."""


@dataclass(frozen=True)
class BatchItem:
    id: int
    type: str

    @property
    def key(self) -> str:
        return item_key(self.type, self.id)


def item_key(media_type: str, title_id: int) -> str:
    """Composite result key, e.g. ``movie_123`` or ``tv_456``."""
    return f"{media_type}_{title_id}"


def validate_batch(raw_items: Iterable[Any], max_items: int = MAX_BATCH_ITEMS) -> list[BatchItem]:
    """Validate and canonicalize batch items.

    Accepts objects with ``id``/``type`` attributes or mappings with those keys.
    """
    items = list(raw_items or [])
    if not items:
        raise BatchValidationError("items array cannot be empty")
    if len(items) > max_items:
        raise BatchValidationError("batch size exceeds maximum")

    validated: list[BatchItem] = []
    for raw in items:
        if isinstance(raw, dict):
            raw_id, raw_type = raw.get("id"), raw.get("type")
        else:
            raw_id, raw_type = getattr(raw, "id", None), getattr(raw, "type", None)
        try:
            media_type = parse_media_type(raw_type)
            title_id = validate_title_id(raw_id)
        except AvailabilityValidationError as exc:
            raise BatchValidationError(str(exc)) from exc
        validated.append(BatchItem(id=title_id, type=media_type))
    return validated


class BatchOrchestrator:
    """Resolve up to ``max_items`` titles, at most ``concurrency`` at a time.

    Every item gets an entry in the result: an upstream failure (or any other
    failure inside one item) degrades that item to no providers and every
    active service unmatched, without touching its siblings.
    """

    def __init__(
        self,
        resolver: AvailabilityResolver,
        *,
        max_items: int = MAX_BATCH_ITEMS,
        concurrency: int = MAX_CONCURRENT_RESOLUTIONS,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._resolver = resolver
        self._max_items = max_items
        self._concurrency = concurrency

    @property
    def max_items(self) -> int:
        return self._max_items

    async def resolve_batch(
        self,
        raw_items: Iterable[Any],
        region: str,
        active: frozenset[str],
    ) -> dict[str, AvailabilityResult]:
        """Resolve every item and return results keyed by ``<type>_<id>``.

        Raises:
            BatchValidationError: before any I/O, for an empty, oversized or invalid batch
        """
        items = validate_batch(raw_items, self._max_items)
        observe_batch_size(len(items))

        gate = asyncio.Semaphore(self._concurrency)

        async def _resolve_item(item: BatchItem) -> tuple[str, AvailabilityResult]:
            async with gate:
                try:
                    result = await self._resolver.resolve_or_degrade(
                        item.id, item.type, region, active, mode="batch"
                    )
                except Exception:
                    logger.exception("availability: unexpected failure for %s", item.key)
                    result = AvailabilityResult.empty(active, degraded=True)
            return item.key, result

        with get_tracer().start_as_current_span("availability.batch") as span:
            span.set_attribute("availability.batch.items", len(items))
            span.set_attribute("availability.region", region)
            tasks = [asyncio.create_task(_resolve_item(item)) for item in items]
            try:
                outcomes = await asyncio.gather(*tasks, return_exceptions=True)
            except asyncio.CancelledError:
                # Nothing outlives the request: cancel and wait for every child.
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                logger.info("availability: batch of %d cancelled", len(items))
                raise

        # Single collector: tasks hand back (key, result) and only this loop writes.
        results: dict[str, AvailabilityResult] = {}
        for item, outcome in zip(items, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(
                    "availability: %s did not complete: %r", item.key, outcome
                )
                results[item.key] = AvailabilityResult.empty(active, degraded=True)
                continue
            key, result = outcome
            results[key] = result
        return results


__all__ = [
    "BatchItem",
    "BatchOrchestrator",
    "BatchValidationError",
    "MAX_BATCH_ITEMS",
    "MAX_CONCURRENT_RESOLUTIONS",
    "item_key",
    "validate_batch",
]
