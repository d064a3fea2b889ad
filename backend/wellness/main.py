"""FastAPI application entry point with lifespan management."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wellness.api.router import api_router
from wellness.config import DEFAULT_JWT_SECRET, Settings, settings
from wellness.dependencies import get_database
from wellness.errors import register_exception_handlers
from wellness.middleware import (
    FixedWindowCounter,
    RateLimitMiddleware,
    SecurityHeadersMiddleware,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown lifecycle."""
    logger.info("Starting wellness sessions backend...")

    app_settings: Settings = app.state.settings
    if app_settings.jwt_secret == DEFAULT_JWT_SECRET:
        logger.warning("JWT_SECRET is not set; tokens use the development secret")

    database = get_database()
    await database.initialize()
    logger.info("Database initialized successfully")

    yield

    await database.close()
    logger.info("Wellness sessions backend shut down cleanly")


def create_app(app_settings: Settings = settings) -> FastAPI:
    """Build the application: middleware, error handlers and routes."""
    app = FastAPI(
        title="Wellness Sessions API",
        description="Draft, publish and browse wellness session metadata",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    # Rate limiting on /api/* (innermost, so CORS headers still apply to 429s)
    app.add_middleware(
        RateLimitMiddleware,
        counter=FixedWindowCounter(
            max_hits=app_settings.rate_limit_max,
            window_seconds=app_settings.rate_limit_window_seconds,
        ),
    )
    app.add_middleware(SecurityHeadersMiddleware)

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[app_settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_exception_handlers(app, app_settings)

    # Mount API routes
    app.include_router(api_router, prefix="/api")
    return app


# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = create_app()
