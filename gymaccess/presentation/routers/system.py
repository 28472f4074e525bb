"""System router for non-versioned application endpoints.

Provides root and health endpoints for load balancers and basic
diagnostics.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from gymaccess.core.config import settings
from gymaccess.core.container import get_database
from gymaccess.infrastructure.persistence.database import Database

system_router = APIRouter(tags=["System"])


@system_router.get("/")
async def root() -> dict[str, str]:
    """Root endpoint - basic status check.

    Returns:
        dict[str, str]: Service name, status and version.
    """
    return {
        "message": settings.app_name,
        "status": "operational",
        "version": settings.app_version,
    }


@system_router.get("/health")
async def health(
    database: Annotated[Database, Depends(get_database)],
) -> JSONResponse:
    """Health check endpoint for monitoring and load balancers.

    Returns:
        JSONResponse: 200 when the database answers, 503 otherwise.
    """
    if await database.check_connection():
        return JSONResponse(content={"status": "healthy", "database": "ok"})
    return JSONResponse(
        status_code=503,
        content={"status": "unhealthy", "database": "unreachable"},
    )
