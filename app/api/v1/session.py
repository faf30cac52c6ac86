"""
Session endpoints: login, logout and per-session dashboard state.
"""

import logging

from fastapi import APIRouter, Depends

from app.api import deps
from app.core.exceptions import BaseAppException
from app.core.session import SessionContext, SessionRegistry
from app.schemas.common import MessageResponse
from app.schemas.session import ActiveTabUpdate, LoginRequest, LoginResponse, SessionInfo
from app.services.dashboard import DashboardViewRegistry
from app.services.integrations.hostel_api import HostelApiClient
from app.utils.validators import validate_login

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/session", tags=["Session"])


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    client: HostelApiClient = Depends(deps.get_api_client),
    registry: SessionRegistry = Depends(deps.get_session_registry),
):
    """
    Log in against the hostel API and open a portal session.

    The returned token is the bearer token for every further request.
    """
    validate_login(payload)

    data = await client.login(payload.email, payload.password)
    session = registry.open(data["token"], str(data.get("role") or ""))

    return LoginResponse(
        message=data.get("message"),
        token=data["token"],
        role=session.role,
        redirect=session.home,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    token: str = Depends(deps.get_token),
    session: SessionContext = Depends(deps.get_session),
    client: HostelApiClient = Depends(deps.get_api_client),
    registry: SessionRegistry = Depends(deps.get_session_registry),
    views: DashboardViewRegistry = Depends(deps.get_view_registry),
):
    """Close the session locally even when the upstream logout fails."""
    try:
        await client.logout()
    except BaseAppException as e:
        logger.warning(f"Upstream logout failed: {e.message}")

    registry.close(token)
    views.drop_session(token)
    return MessageResponse(message="Logged out")


@router.get("", response_model=SessionInfo)
async def read_session(session: SessionContext = Depends(deps.get_session)):
    return SessionInfo(role=session.role, active_tab=session.active_tab)


@router.put("/active-tab", response_model=SessionInfo)
async def update_active_tab(
    payload: ActiveTabUpdate,
    session: SessionContext = Depends(deps.require_admin),
):
    """Remember which admin dashboard tab was open last."""
    session.set_active_tab(payload.tab)
    return SessionInfo(role=session.role, active_tab=session.active_tab)
