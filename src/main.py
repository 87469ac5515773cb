"""Main FastAPI application entry point.

Assembles the Keyward identity service: OAuth2 / OpenID Connect protocol
endpoints, discovery, the versioned management API, trace middleware and
the global exception handlers.

The lifespan starts the retention sweeper (expires abandoned authorization
requests and long-dead tokens) and releases storage connections on
shutdown.
"""

import asyncio
import contextlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from src.core.config import get_settings
from src.core.container import get_index_store, get_logger, get_retention_sweeper
from src.presentation.api.errors import register_exception_handlers
from src.presentation.api.middleware.trace_middleware import TraceMiddleware
from src.presentation.api.v1 import v1_router
from src.presentation.routers import discovery_router, oauth2_router, system_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager.

    Handles startup and shutdown events:
    - Startup: Start the background retention sweep (unless disabled)
    - Shutdown: Stop the sweep, close database and Redis connections

    Args:
        app: FastAPI application instance.

    Yields:
        None during application lifetime.
    """
    settings = get_settings()
    logger = get_logger()

    sweeper_task: asyncio.Task[None] | None = None
    if settings.retention_sweep_interval_seconds > 0:
        sweeper_task = asyncio.create_task(
            get_retention_sweeper().run_forever(settings.retention_sweep_interval_seconds)
        )
    logger.info(
        "application_started",
        environment=settings.environment.value,
        event_store_backend=settings.event_store_backend,
        index_store_backend=settings.index_store_backend,
        retention_sweep=sweeper_task is not None,
    )

    yield

    if sweeper_task is not None:
        sweeper_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper_task

    if settings.event_store_backend == "sqlalchemy":
        from src.core.container import get_database

        await get_database().close()
    if settings.index_store_backend == "redis":
        await get_index_store().close()  # type: ignore[attr-defined]

    logger.info("application_stopped")


def create_app() -> FastAPI:
    """Build the FastAPI application.

    Returns:
        FastAPI: Application with middleware, exception handlers and routers.
    """
    settings = get_settings()
    application = FastAPI(
        title=settings.app_name,
        description="OAuth2 / OpenID Connect identity and access management",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        debug=settings.debug,
        lifespan=lifespan,
    )

    # Wire trace middleware (request correlation)
    application.add_middleware(TraceMiddleware)

    # Register global exception handlers (OAuth2 / RFC 9457 error responses)
    register_exception_handlers(application)

    # Protocol endpoints (paths fixed by the OAuth2 / OIDC standards)
    application.include_router(system_router)
    application.include_router(discovery_router)
    application.include_router(oauth2_router)

    # Include API v1 routers (RESTful resource-based endpoints)
    application.include_router(v1_router)

    return application


app = create_app()


def run() -> None:
    """Serve the application with uvicorn (the `keyward` console script)."""
    settings = get_settings()
    get_logger().info(
        "server_starting",
        host=settings.host,
        port=settings.port,
        environment=settings.environment.value,
    )
    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_config=None,
    )


if __name__ == "__main__":
    run()
