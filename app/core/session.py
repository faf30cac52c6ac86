"""
Session state.

A session keeps the upstream bearer token, the role the API issued with it
and the admin dashboard's last active tab. Values live in the local storage
under the fixed keys ``token``, ``role`` and ``admin-active-tab``, inside a
namespace derived from the token so that sessions never see each other's
state.
"""

import hashlib
import logging
from typing import Optional, Sequence, Union

from app.core.exceptions import AuthenticationError, AuthorizationError
from app.schemas.session import DashboardTab, UserRole
from app.services.storage import LocalStorage

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
ROLE_KEY = "role"
ACTIVE_TAB_KEY = "admin-active-tab"

ROLE_HOME = {
    UserRole.ADMIN.value: "/admin/dashboard",
    UserRole.STUDENT.value: "/student/dashboard",
}


class SessionContext:
    """Explicit session handle passed to everything that needs auth state."""

    def __init__(self, storage: LocalStorage):
        self.storage = storage

    @property
    def token(self) -> Optional[str]:
        return self.storage.get_item(TOKEN_KEY)

    @property
    def role(self) -> Optional[str]:
        return self.storage.get_item(ROLE_KEY)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token and self.role)

    @property
    def active_tab(self) -> DashboardTab:
        """Last active dashboard tab; defaults to complaints."""
        raw = self.storage.get_item(ACTIVE_TAB_KEY)
        try:
            return DashboardTab(raw) if raw else DashboardTab.COMPLAINTS
        except ValueError:
            return DashboardTab.COMPLAINTS

    def set_active_tab(self, tab: Union[DashboardTab, str]) -> DashboardTab:
        tab = DashboardTab(tab)
        self.storage.set_item(ACTIVE_TAB_KEY, tab.value)
        return tab

    def set_auth(self, token: str, role: str) -> None:
        self.storage.set_item(TOKEN_KEY, token)
        self.storage.set_item(ROLE_KEY, role)

    def clear(self) -> None:
        """Forget token, role and dashboard tab."""
        for key in (TOKEN_KEY, ROLE_KEY, ACTIVE_TAB_KEY):
            self.storage.remove_item(key)

    def require_role(self, roles: Sequence[str]) -> None:
        """
        Raises:
            AuthenticationError: No token or role stored.
            AuthorizationError: The role is not among ``roles``.
        """
        if not self.is_authenticated:
            raise AuthenticationError("Not logged in")
        if roles and self.role not in roles:
            raise AuthorizationError(
                f"Role '{self.role}' may not access this resource",
                required_role=", ".join(roles),
            )

    @property
    def home(self) -> str:
        return ROLE_HOME.get(self.role or "", "/student/dashboard")


class SessionRegistry:
    """Opens, finds and closes sessions by bearer token."""

    PREFIX = "session:"

    def __init__(self, storage: LocalStorage):
        self.storage = storage

    def _context(self, token: str) -> SessionContext:
        digest = hashlib.sha256(token.encode("utf-8")).hexdigest()[:32]
        return SessionContext(self.storage.namespaced(f"{self.PREFIX}{digest}:"))

    def open(self, token: str, role: str) -> SessionContext:
        context = self._context(token)
        context.set_auth(token, role)
        logger.info(f"Session opened for role {role}")
        return context

    def get(self, token: Optional[str]) -> Optional[SessionContext]:
        if not token:
            return None
        context = self._context(token)
        return context if context.token == token else None

    def close(self, token: str) -> None:
        context = self.get(token)
        if context is not None:
            context.clear()
            logger.info("Session closed")


__all__ = [
    "TOKEN_KEY",
    "ROLE_KEY",
    "ACTIVE_TAB_KEY",
    "SessionContext",
    "SessionRegistry",
]
