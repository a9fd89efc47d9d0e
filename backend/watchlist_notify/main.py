from contextlib import asynccontextmanager
import logging

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from watchlist_notify.api.metrics import router as metrics_router
from watchlist_notify.api.v1.routes import router as api_router
from watchlist_notify.api.v1.shared.rate_limit import limiter
from watchlist_notify.core.config import Settings, get_settings
from watchlist_notify.core.database import build_engine, build_session_factory
from watchlist_notify.core.telemetry import configure_opentelemetry, instrument_app
from watchlist_notify.services.cache import create_cache_service
from watchlist_notify.services.tmdb_client import TMDbClient
from watchlist_notify.services.tmdb_errors import ProviderSourceConfigError

logger = logging.getLogger(__name__)
REQUEST_ID_HEADER = "X-Request-Id"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _configure_logging(level: str) -> None:
    if logging.getLogger().handlers:
        logging.getLogger().setLevel(level.upper())
        return
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def _configure_sqlalchemy_logging(database_echo: bool) -> None:
    """
    Silence verbose SQLAlchemy logs unless echo is explicitly enabled.

    User lookups run on every availability request; statement dumps only show
    up when DATABASE_ECHO=true.
    """
    level = logging.INFO if database_echo else logging.WARNING
    for name in (
        "sqlalchemy",
        "sqlalchemy.engine",
        "sqlalchemy.engine.Engine",
        "sqlalchemy.pool",
    ):
        sa_logger = logging.getLogger(name)
        sa_logger.setLevel(level)
        sa_logger.propagate = database_echo


def _install_request_id_middleware(app: FastAPI) -> None:
    """Ensure each response includes a stable X-Request-Id header."""

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER, str(uuid4()))
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def _build_tmdb_client(settings: Settings) -> TMDbClient | None:
    try:
        return TMDbClient(settings)
    except ProviderSourceConfigError as exc:
        logger.warning("TMDb disabled: %s", exc)
        return None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the engine, cache and TMDb client from app settings; release them on shutdown."""
    settings: Settings = app.state.settings

    app.state.engine = build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.cache = await create_cache_service(settings)
    app.state.tmdb = _build_tmdb_client(settings)
    try:
        yield
    finally:
        if app.state.tmdb is not None:
            await app.state.tmdb.aclose()
        await app.state.cache.close()
        await app.state.engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Application factory for FastAPI."""
    settings = settings or get_settings()
    _configure_logging(settings.log_level)
    _configure_sqlalchemy_logging(settings.database_echo)

    app = FastAPI(
        title="Watchlist Notify API",
        description="Streaming availability for watchlist titles, backed by TMDb.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.limiter = limiter.configure(settings)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    configure_opentelemetry(settings)
    instrument_app(app, settings)
    _install_request_id_middleware(app)

    allow_origins = settings.cors_allow_origins
    allow_origin_regex = settings.cors_allow_origin_regex
    if allow_origins or allow_origin_regex:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allow_origins,
            allow_origin_regex=allow_origin_regex,
            allow_credentials=bool(allow_origins),
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(metrics_router)
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()
