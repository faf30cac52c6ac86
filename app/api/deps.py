# app/api/deps.py
"""
Shared FastAPI dependencies.

Application-wide resources (storage, session registry, dashboard views and
the upstream HTTP pool) are created once by the app factory and kept on
``app.state``; the callables below hand them to route functions.

Example usage in a router:

    from fastapi import APIRouter, Depends
    from app.api import deps

    router = APIRouter()

    @router.get("/me")
    async def read_me(session = Depends(deps.get_session)):
        return session.role
"""

from typing import Optional

import httpx
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config.settings import Settings
from app.core.exceptions import AuthenticationError
from app.core.session import SessionContext, SessionRegistry
from app.schemas.session import UserRole
from app.services.dashboard import DashboardViewRegistry
from app.services.drafts import FormDraftStore
from app.services.integrations.hostel_api import HostelApiClient
from app.services.storage import LocalStorage

_bearer = HTTPBearer(auto_error=False)

PRESETS_NAMESPACE = "presets:"
DRAFTS_NAMESPACE = "drafts:"


# --- Application resources -----------------------------------------------------

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> LocalStorage:
    return request.app.state.storage


def get_session_registry(request: Request) -> SessionRegistry:
    return request.app.state.session_registry


def get_view_registry(request: Request) -> DashboardViewRegistry:
    return request.app.state.views


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


# --- Session -------------------------------------------------------------------

def get_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Optional[str]:
    """Bearer token of the request, if any."""
    return credentials.credentials if credentials else None


def get_session(
    token: Optional[str] = Depends(get_token),
    registry: SessionRegistry = Depends(get_session_registry),
) -> SessionContext:
    """
    Session opened by ``POST /session/login`` for this token.

    Raises:
        AuthenticationError: No token, or the token has no open session.
    """
    session = registry.get(token)
    if session is None:
        raise AuthenticationError("Not logged in")
    return session


def require_admin(session: SessionContext = Depends(get_session)) -> SessionContext:
    session.require_role([UserRole.ADMIN.value])
    return session


def require_student(session: SessionContext = Depends(get_session)) -> SessionContext:
    session.require_role([UserRole.STUDENT.value])
    return session


# --- Upstream API --------------------------------------------------------------

def get_api_client(
    token: Optional[str] = Depends(get_token),
    http: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
) -> HostelApiClient:
    """Hostel API client authenticated with the request's bearer token."""
    return HostelApiClient(http, token=token, upload_path_template=settings.UPLOAD_PATH_TEMPLATE)


# --- Persisted client state ----------------------------------------------------

def get_preset_storage(
    storage: LocalStorage = Depends(get_storage),
    session: SessionContext = Depends(get_session),
) -> LocalStorage:
    """Presets are shared by everyone using the portal instance."""
    return storage.namespaced(PRESETS_NAMESPACE)


def get_draft_store(
    session: SessionContext = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> FormDraftStore:
    """Drafts belong to the session that wrote them."""
    return FormDraftStore(
        session.storage.namespaced(DRAFTS_NAMESPACE),
        max_age_hours=settings.DRAFT_MAX_AGE_HOURS,
    )


__all__ = [
    "get_settings",
    "get_storage",
    "get_session_registry",
    "get_view_registry",
    "get_http_client",
    "get_token",
    "get_session",
    "require_admin",
    "require_student",
    "get_api_client",
    "get_preset_storage",
    "get_draft_store",
]
