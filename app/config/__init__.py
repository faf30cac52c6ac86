"""
Configuration package for the hostel grievance portal.

This package contains the configuration modules for the application,
including environment settings, logging and the Redis connection used
by the redis storage backend.
"""

from app.config.settings import settings, get_settings, Settings
from app.config.logging import setup_logging, get_logger

__all__ = ['settings', 'get_settings', 'Settings', 'setup_logging', 'get_logger']
