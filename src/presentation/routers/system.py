"""System router for non-versioned application endpoints.

Root and health endpoints for load balancers and basic diagnostics. Health
checks the database only when the durable event store is configured.
"""

from fastapi import APIRouter, Response, status

from src.core.config import get_settings

system_router = APIRouter(tags=["System"])


@system_router.get("/")
async def root() -> dict[str, str]:
    """Root endpoint - basic status check.

    Returns:
        dict[str, str]: Service name, status and version.
    """
    settings = get_settings()
    return {
        "message": settings.app_name,
        "status": "operational",
        "version": settings.app_version,
    }


@system_router.get("/health")
async def health(response: Response) -> dict[str, str]:
    """Health check endpoint for monitoring and load balancers.

    Returns:
        dict[str, str]: `status`, plus `database` (up/down) when the
            sqlalchemy event store is in use. A down database answers 503.
    """
    report = {"status": "healthy"}
    if get_settings().event_store_backend == "sqlalchemy":
        from src.core.container import get_database

        database_up = await get_database().check_connection()
        report["database"] = "up" if database_up else "down"
        if not database_up:
            report["status"] = "unhealthy"
            response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return report
