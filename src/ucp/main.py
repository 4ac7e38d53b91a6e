"""FastAPI application factory."""

import asyncio
import contextlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from ucp.accounts.router import router as accounts_router
from ucp.auth.router import router as auth_router
from ucp.characters.router import router as characters_router
from ucp.config import get_settings
from ucp.database import close_db, get_session_factory, init_db
from ucp.email.dispatch import get_dispatcher
from ucp.health.router import router as health_router
from ucp.maintenance import run_purge_loop
from ucp.middleware import setup_middleware
from ucp.redis_client import close_redis, init_redis

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)

    purge_task = asyncio.create_task(
        run_purge_loop(get_session_factory(), settings.character_purge_interval_hours * 3600)
    )
    logger.info("ucp_started", environment=settings.environment)

    yield

    purge_task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await purge_task

    await get_dispatcher().drain()
    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="SA-RP UCP API",
        description="User control panel backend for the SA-RP game server",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router, prefix=settings.api_prefix)
    app.include_router(accounts_router, prefix=settings.api_prefix)
    app.include_router(characters_router, prefix=settings.api_prefix)

    return app


app = create_app()
