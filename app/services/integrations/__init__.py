"""
Integrations service layer.

The portal integrates with a single external system, the hostel REST API.
"""

from app.services.integrations.hostel_api import HostelApiClient, create_http_client

__all__ = [
    "HostelApiClient",
    "create_http_client",
]
