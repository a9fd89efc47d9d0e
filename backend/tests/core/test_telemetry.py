from fastapi import FastAPI

from watchlist_notify.core.config import Settings
from watchlist_notify.core.telemetry import (
    configure_opentelemetry,
    get_tracer,
    instrument_app,
)


def test_disabled_tracing_is_a_no_op():
    settings = Settings(otel_enabled=False)
    app = FastAPI()

    assert configure_opentelemetry(settings) is False
    instrument_app(app, settings)


def test_tracer_available_without_configuration():
    with get_tracer().start_as_current_span("test-span") as span:
        span.set_attribute("test.attribute", 1)
