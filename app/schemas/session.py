"""
Session schemas.
"""

from enum import Enum
from typing import Union

from pydantic import Field

from app.schemas.common.base import BaseSchema

__all__ = [
    "UserRole",
    "DashboardTab",
    "LoginRequest",
    "LoginResponse",
    "SessionInfo",
    "ActiveTabUpdate",
]


class UserRole(str, Enum):
    """Roles issued by the hostel API."""
    STUDENT = "student"
    ADMIN = "admin"
    COUNSELOR = "counselor"


class DashboardTab(str, Enum):
    """Tabs of the admin dashboard."""
    COMPLAINTS = "complaints"
    APOLOGIES = "apologies"


class LoginRequest(BaseSchema):
    """Credentials forwarded to the hostel API."""

    email: str = Field(default="", max_length=255)
    password: str = Field(default="", max_length=255)


class LoginResponse(BaseSchema):
    message: Union[str, None] = None
    token: str
    role: str
    redirect: str = Field(..., description="Dashboard path for the role")


class SessionInfo(BaseSchema):
    """State of the current session."""

    role: str
    active_tab: DashboardTab = Field(default=DashboardTab.COMPLAINTS, alias="activeTab")


class ActiveTabUpdate(BaseSchema):
    tab: DashboardTab
