"""OpenTelemetry configuration and initialization."""

from __future__ import annotations

import logging
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.propagate import set_global_textmap
from opentelemetry.propagators.b3 import B3MultiFormat
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from watchlist_notify.core.config import Settings

logger = logging.getLogger(__name__)


def configure_opentelemetry(settings: Settings) -> bool:
    """Install a tracer provider exporting to the configured OTLP collector.

    Returns True when tracing was enabled. Failures are logged and the
    application keeps running untraced.
    """
    if not settings.otel_enabled:
        logger.info("OpenTelemetry tracing is disabled")
        return False

    try:
        set_global_textmap(B3MultiFormat())

        resource = Resource.create(
            {
                "service.name": settings.otel_service_name,
                "service.version": settings.otel_service_version,
                "service.namespace": "watchlist-notify",
            }
        )
        tracer_provider = TracerProvider(resource=resource)
        trace.set_tracer_provider(tracer_provider)

        exporter = OTLPSpanExporter(
            endpoint=settings.otel_exporter_otlp_endpoint,
            headers=settings.otel_exporter_otlp_headers,
        )
        tracer_provider.add_span_processor(BatchSpanProcessor(exporter))

        logger.info(
            "OpenTelemetry configured for service '%s' (OTLP endpoint %s)",
            settings.otel_service_name,
            settings.otel_exporter_otlp_endpoint,
        )
        return True
    except Exception as exc:
        logger.warning("Failed to configure OpenTelemetry: %s", exc)
        logger.info("Application will continue without tracing")
        return False


def instrument_app(app: Any, settings: Settings) -> None:
    """Instrument FastAPI and outbound httpx calls when tracing is enabled."""
    if not settings.otel_enabled:
        return

    try:
        FastAPIInstrumentor.instrument_app(app)
        HTTPXClientInstrumentor().instrument()
        logger.info("FastAPI and HTTPX instrumentation enabled")
    except Exception as exc:
        logger.warning("Failed to instrument application: %s", exc)


def get_tracer() -> trace.Tracer:
    """Get the configured tracer instance (a no-op tracer when disabled)."""
    return trace.get_tracer("watchlist_notify")
