"""FastAPI application entry point for the VIGIA Recife open-data proxy."""

import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import Settings, settings as default_settings
from errors import register_error_handlers
from services.cache import TTLCache
from services.fetcher import Fetcher
from services.proxy import OpenDataProxy
from services.scheduler import CacheFlusher

# Structured logging: JSON for production, human-readable for local
if default_settings.is_production:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
        stream=sys.stdout,
    )
else:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    cache: TTLCache | None = None,
    fetcher: Fetcher | None = None,
) -> FastAPI:
    """Build the app. Cache and fetcher are created here unless injected."""
    settings = settings or default_settings
    problems = settings.validate()
    if problems:
        raise ValueError(f"Settings must be positive: {', '.join(problems)}")
    if cache is None:
        cache = TTLCache(default_ttl=settings.cache_default_ttl)
    if fetcher is None:
        fetcher = Fetcher(settings)
    flusher = CacheFlusher(cache, interval_hours=settings.cache_flush_interval_hours)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        flusher.start()
        logger.info("VIGIA proxy v%s ready (default cache TTL %ds)", settings.version, settings.cache_default_ttl)
        try:
            yield
        finally:
            try:
                await flusher.stop()
            finally:
                await fetcher.aclose()

    app = FastAPI(title="VIGIA Recife Proxy", version=settings.version, lifespan=lifespan)
    app.state.proxy = OpenDataProxy(cache, fetcher, settings)
    app.state.flusher = flusher

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Security headers
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Centralized error handlers
    register_error_handlers(app)

    from routes.catalog import router as catalog_router
    from routes.curated import router as curated_router
    from routes.finance import router as finance_router
    from routes.health import router as health_router

    app.include_router(health_router)
    app.include_router(catalog_router)
    app.include_router(curated_router)
    app.include_router(finance_router)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host=default_settings.host, port=default_settings.port)
