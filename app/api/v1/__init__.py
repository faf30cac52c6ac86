# app/api/v1/__init__.py
"""
API v1 package.

This module re-exports the router that aggregates all v1 sub-routers
(session, admin, student, presets, drafts).

The actual router composition lives in `app.api.v1.router`.
"""

from .router import router as api_router

# `api_router` is what you typically include into the FastAPI app:
#
#     from app.api.v1 import api_router as api_v1_router
#     app.include_router(api_v1_router, prefix="/api/v1")
#

__all__ = ["api_router"]
