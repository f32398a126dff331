import logging
import sys
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .core.auth import bearer_auth_middleware
from .core import errors
from .routers import health, rates
from .services.rates.base import RateProvider, Resource
from .services.rates.cache_service import RateCacheService
from .services.rates.freshness import FreshnessPolicy
from .services.rates.providers import OpenExchangeRatesProvider
from .services.rates.scheduler import RefreshScheduler
from .services.rates.store import CacheStore
from .services.rates.errors import RatesError

logger = logging.getLogger("app")


def build_rate_service(
    settings: Settings, provider: RateProvider | None = None
) -> RateCacheService:
    provider = provider or OpenExchangeRatesProvider(
        settings.oxr_app_id,
        settings.oxr_base_url,
        timeout=settings.http_timeout_seconds,
        retries=settings.http_retries,
    )
    store = CacheStore(settings.data_dir)
    freshness = FreshnessPolicy(
        store,
        ttls={
            Resource.RATES: settings.rates_ttl_seconds,
            Resource.SYMBOLS: settings.symbols_ttl_seconds,
        },
    )
    return RateCacheService(provider, store, freshness)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start background refresh on startup; stop it and release the provider on shutdown."""
    settings: Settings = app.state.settings
    scheduler: RefreshScheduler = app.state.scheduler
    if settings.enable_background_refresh:
        scheduler.start()
    else:
        logger.info("background refresh disabled")

    yield

    scheduler.stop()
    app.state.rate_service.provider.close()


def create_app(
    settings_override: Settings | None = None,
    provider: RateProvider | None = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., temp data dir). Falls back to cached get_settings().
    provider: inject a RateProvider (tests use fakes); defaults to Open Exchange Rates.
    """
    settings = settings_override or get_settings()
    # Initialize logging early
    init_logging(debug=settings.debug)

    rate_service = build_rate_service(settings, provider)

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.rate_service = rate_service
    app.state.scheduler = RefreshScheduler(rate_service)

    # Middleware: auth (innermost), request id / structured logging, CORS (outermost)
    app.middleware("http")(bearer_auth_middleware)
    app.middleware("http")(request_context_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "HEAD", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
    )

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(RatesError, errors.rates_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    api = APIRouter(prefix="/api")
    api.include_router(health.router)
    api.include_router(rates.router)
    app.include_router(api)

    return app


def run() -> None:
    """Console entry point: load settings from the environment and serve with uvicorn."""
    import uvicorn

    try:
        settings = get_settings()
    except ValidationError as e:
        init_logging()
        missing = ", ".join(
            str(err["loc"][0]).upper() for err in e.errors() if err.get("loc")
        )
        logger.critical("invalid or missing configuration: %s", missing or e)
        sys.exit(1)

    app = create_app(settings)
    logger.info("Server starting on port %d", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
