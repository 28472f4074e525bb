"""API v1 routers.

All v1 endpoints are mounted under /api/v1 via `v1_router`.
"""

from fastapi import APIRouter

from gymaccess.presentation.routers.api.v1.branches import router as branches_router
from gymaccess.presentation.routers.api.v1.members import router as members_router
from gymaccess.presentation.routers.api.v1.webhooks import router as webhooks_router

v1_router = APIRouter(prefix="/api/v1")
v1_router.include_router(webhooks_router)
v1_router.include_router(branches_router)
v1_router.include_router(members_router)

__all__ = ["v1_router"]
