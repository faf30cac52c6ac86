# app/api/__init__.py
"""
HTTP layer of the grievance portal.

Versioned routers live in sub-packages (``app.api.v1``); shared
dependencies live in ``app.api.deps``.
"""
