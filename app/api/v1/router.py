"""
API v1 Router - Main Entry Point
Aggregates all v1 API endpoints for the hostel grievance portal
"""
import logging

from fastapi import APIRouter

from app.api.v1 import admin, drafts, presets, session, student
from app.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

# Create main API v1 router with proper configuration
router = APIRouter(
    responses={
        400: {"model": ErrorResponse, "description": "Bad Request"},
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        403: {"model": ErrorResponse, "description": "Forbidden"},
        404: {"model": ErrorResponse, "description": "Not Found"},
        409: {"model": ErrorResponse, "description": "Superseded by a newer request"},
        422: {"model": ErrorResponse, "description": "Validation Error"},
        502: {"model": ErrorResponse, "description": "Hostel API Error"},
    }
)

MODULES = {
    "session": session,
    "admin": admin,
    "student": student,
    "presets": presets,
    "drafts": drafts,
}

for name, module in MODULES.items():
    router.include_router(module.router)
    logger.debug(f"Registered {name} router")


# Health and diagnostic endpoints
@router.get("/health", tags=["System Health"])
async def api_health_check():
    """
    API health check with module status
    """
    return {
        "status": "healthy",
        "version": "1.0.0",
        "api_version": "v1",
        "loaded_modules": list(MODULES),
        "description": "Hostel Grievance Portal API v1"
    }
