"""
API routes module.

FastAPI routers for all HTTP endpoints.
"""

from fastapi import APIRouter

from .routers import (
    extractions_router,
    health_router,
    jobs_router,
    projects_router,
)

api_router = APIRouter()

# Include all routers
api_router.include_router(health_router)
api_router.include_router(extractions_router)
api_router.include_router(jobs_router)
api_router.include_router(projects_router)

__all__ = ["api_router"]
