# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application factory for the Scholaris HTTP API."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from scholaris import __version__
from scholaris.api.middleware.auth import AuthMiddleware
from scholaris.api.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from scholaris.api.routes import health
from scholaris.api.v1 import router as v1_router
from scholaris.core.config import get_settings
from scholaris.infrastructure.background import start_scheduler, stop_scheduler
from scholaris.infrastructure.database.connection import close_database, init_database
from scholaris.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Bring up logging, the database pool and the job scheduler.

    The API still serves requests when the scheduler cannot start; only
    session cleanup is lost in that case.
    """
    settings = get_settings()
    setup_logging(settings)
    logger.info(
        "Scholaris API %s starting (environment=%s, debug=%s)",
        __version__,
        settings.environment,
        settings.debug,
    )

    await init_database(settings)

    try:
        await start_scheduler()
    except Exception as e:
        logger.warning("Scheduler unavailable, session cleanup disabled: %s", str(e))

    yield

    try:
        await stop_scheduler()
    except Exception as e:
        logger.warning("Scheduler did not stop cleanly: %s", str(e))

    await close_database()
    logger.info("Scholaris API stopped")


def create_app() -> FastAPI:
    """Build the FastAPI application.

    Interactive docs are served only in debug mode.

    Returns:
        Application with middleware, exception handlers and routers
        installed.
    """
    settings = get_settings()
    docs_enabled = settings.debug

    app = FastAPI(
        title="Scholaris API",
        description="School management backend with AI-assisted course content",
        version=__version__,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
        # A 307 to the slash variant drops the Authorization header
        redirect_slashes=False,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # Starlette runs the last added middleware first: CORS, then auth,
    # then rate limiting keyed on the authenticated user.
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(AuthMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins_list,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allow_methods,
        allow_headers=settings.cors.allow_headers,
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(v1_router)

    return app
