from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.router import router as api_v1_router
from app.config.logging import setup_logging
from app.config.settings import Settings, get_settings
from app.core.exceptions import register_exception_handlers
from app.core.middleware import register_middlewares
from app.core.session import SessionRegistry
from app.services.dashboard import DashboardViewRegistry
from app.services.integrations.hostel_api import create_http_client
from app.services.storage import create_storage

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Configures title, version, debug mode from Settings.
    - Builds the storage backend, session registry, dashboard views and
      the pooled client for the hostel API.
    - Registers CORS, core middleware, and exception handlers.
    - Includes the versioned API router under /api/v1.

    Args:
        config: Settings to use instead of the environment.
        transport: Transport for the hostel API client, e.g. a mock in tests.
    """
    config = config or get_settings()
    setup_logging(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"{config.APP_NAME} started against {config.UPSTREAM_API_BASE_URL}")
        yield
        await app.state.http_client.aclose()
        logger.info(f"{config.APP_NAME} stopped")

    app = FastAPI(
        title=config.APP_NAME,
        debug=config.DEBUG,
        version=config.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    storage = create_storage(config)
    app.state.settings = config
    app.state.storage = storage
    app.state.session_registry = SessionRegistry(storage)
    app.state.views = DashboardViewRegistry()
    app.state.http_client = create_http_client(
        config.UPSTREAM_API_BASE_URL,
        timeout=config.API_TIMEOUT_SECONDS,
        transport=transport,
    )

    # CORS Configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register shared core middlewares (request ID, timing, etc.)
    register_middlewares(app, include_security=not config.is_development())
    register_exception_handlers(app)

    # Mount API v1 under /api/v1
    app.include_router(api_v1_router, prefix=config.API_V1_STR)

    @app.get("/health", tags=["System Health"])
    async def health_check():
        return {"status": "healthy", "service": config.APP_NAME}

    return app


app = create_app()
