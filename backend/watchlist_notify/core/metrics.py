from __future__ import annotations

from prometheus_client import Counter, Histogram

CACHE_EVENTS = Counter(
    "watchlist_cache_events_total",
    "Cache operations recorded by the availability service.",
    labelnames=("cache", "event"),
)
TMDB_REQUESTS = Counter(
    "watchlist_tmdb_requests_total",
    "Outbound TMDb client requests.",
    labelnames=("endpoint", "result"),
)
TMDB_REQUEST_LATENCY = Histogram(
    "watchlist_tmdb_request_seconds",
    "Latency of outbound TMDb client requests.",
    labelnames=("endpoint",),
)
AVAILABILITY_BATCH_SIZE = Histogram(
    "watchlist_availability_batch_items",
    "Number of titles submitted per batch availability request.",
    buckets=(1, 5, 10, 25, 50, 100, 250, 500),
)
AVAILABILITY_RESOLUTIONS = Counter(
    "watchlist_availability_resolutions_total",
    "Availability resolutions by outcome.",
    labelnames=("mode", "outcome"),
)


def record_cache_event(cache: str, event: str) -> None:
    """Increment a cache event counter."""
    CACHE_EVENTS.labels(cache=cache, event=event).inc()


def observe_tmdb_request(endpoint: str, result: str, duration_seconds: float) -> None:
    """Record TMDb request result and latency."""
    TMDB_REQUESTS.labels(endpoint=endpoint, result=result).inc()
    TMDB_REQUEST_LATENCY.labels(endpoint=endpoint).observe(duration_seconds)


def observe_batch_size(items: int) -> None:
    AVAILABILITY_BATCH_SIZE.observe(items)


def record_resolution(mode: str, outcome: str) -> None:
    """Count a resolved title; outcome is 'resolved' or 'degraded'."""
    AVAILABILITY_RESOLUTIONS.labels(mode=mode, outcome=outcome).inc()
