"""FastAPI application factory — entry point for the web app."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from poesis.config import get_settings
from poesis.routers import admin, auth, bookmarks, health, poems, subscription, webhooks
from poesis.services.stripe_gateway import PaymentGatewayError
from poesis.utils import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    # Auto-create tables for SQLite (dev mode)
    from poesis.db.session import engine
    from poesis.models import Base

    settings = get_settings()
    if settings.database_url.startswith("sqlite"):
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    # Initialize third-party API keys once at startup
    if settings.stripe_secret_key:
        from poesis.services.stripe_gateway import init_stripe
        init_stripe()
    if settings.resend_api_key:
        import resend
        resend.api_key = settings.resend_api_key

    # Shared Redis client for the session store
    from poesis.db.redis import close_redis, init_redis
    await init_redis()

    yield

    await close_redis()
    await engine.dispose()


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.debug)

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
    )
    app.state.settings = settings

    # --- Request logging ---
    @app.middleware("http")
    async def log_api_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        if request.url.path.startswith("/api"):
            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "%s %s %s in %.0fms",
                request.method, request.url.path, response.status_code, duration_ms,
            )
        return response

    # --- Error handlers ---
    @app.exception_handler(PaymentGatewayError)
    async def payment_gateway_error_handler(request: Request, exc: PaymentGatewayError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "kind": exc.kind},
        )

    # --- Routers ---
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(poems.router)
    app.include_router(bookmarks.router)
    app.include_router(subscription.router)
    app.include_router(webhooks.router)
    app.include_router(admin.router)

    return app


app = create_app()
