"""
Main FastAPI application entry point.

Startup:
    - Optionally start the background event poller
Shutdown:
    - Stop the poller, wait for queued token refreshes, close the pool
"""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from gymaccess.core.config import settings
from gymaccess.core.container import (
    get_database,
    get_event_poller,
    get_logger,
    get_token_manager,
)
from gymaccess.presentation.routers.api.v1 import v1_router
from gymaccess.presentation.routers.system import system_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application lifetime.
    """
    logger = get_logger()
    stop = asyncio.Event()
    poller_task: asyncio.Task[None] | None = None

    if settings.event_poller_enabled:
        poller_task = asyncio.create_task(
            get_event_poller().run(settings.event_poll_interval_seconds, stop)
        )

    logger.info("application_started", environment=settings.environment.value)
    yield

    stop.set()
    if poller_task is not None:
        await poller_task
    await get_token_manager().drain()
    await get_database().close()
    logger.info("application_stopped")


app = FastAPI(
    title=settings.app_name,
    description="Gym access-control integration with door-controller vendors",
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    debug=settings.debug,
    lifespan=lifespan,
)

app.include_router(system_router)
app.include_router(v1_router)
