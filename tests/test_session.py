import pytest

from app.core.exceptions import AuthenticationError, AuthorizationError
from app.core.session import ACTIVE_TAB_KEY, ROLE_KEY, TOKEN_KEY, SessionContext, SessionRegistry
from app.schemas.session import DashboardTab


def test_session_context_uses_fixed_keys(storage):
    session = SessionContext(storage)
    session.set_auth("tok", "admin")
    session.set_active_tab("apologies")

    assert storage.get_item(TOKEN_KEY) == "tok"
    assert storage.get_item(ROLE_KEY) == "admin"
    assert storage.get_item(ACTIVE_TAB_KEY) == "apologies"
    assert session.active_tab is DashboardTab.APOLOGIES


def test_active_tab_defaults_to_complaints(storage):
    session = SessionContext(storage)
    assert session.active_tab is DashboardTab.COMPLAINTS

    storage.set_item(ACTIVE_TAB_KEY, "bogus")
    assert session.active_tab is DashboardTab.COMPLAINTS


def test_clear_forgets_everything(storage):
    session = SessionContext(storage)
    session.set_auth("tok", "student")
    session.set_active_tab(DashboardTab.APOLOGIES)

    session.clear()

    assert not session.is_authenticated
    assert storage.keys() == []


def test_home_per_role(storage):
    session = SessionContext(storage)
    session.set_auth("tok", "admin")
    assert session.home == "/admin/dashboard"

    session.set_auth("tok", "student")
    assert session.home == "/student/dashboard"


def test_require_role(storage):
    session = SessionContext(storage)
    with pytest.raises(AuthenticationError):
        session.require_role(["admin"])

    session.set_auth("tok", "student")
    with pytest.raises(AuthorizationError):
        session.require_role(["admin"])

    session.require_role(["student", "admin"])


def test_registry_isolates_sessions(storage):
    registry = SessionRegistry(storage)
    admin = registry.open("tok-a", "admin")
    student = registry.open("tok-s", "student")

    admin.set_active_tab("apologies")

    assert registry.get("tok-a").role == "admin"
    assert registry.get("tok-s").active_tab is DashboardTab.COMPLAINTS
    assert student.role == "student"
    assert registry.get("unknown") is None
    assert registry.get(None) is None


def test_registry_close(storage):
    registry = SessionRegistry(storage)
    registry.open("tok", "admin")

    registry.close("tok")

    assert registry.get("tok") is None
