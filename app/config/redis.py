"""
Redis configuration for the hostel grievance portal.
Provides the Redis client used by the redis storage backend.
"""

from typing import Optional
import logging

from redis import Redis
from redis.connection import ConnectionPool

from app.config.settings import settings

logger = logging.getLogger(__name__)

_redis_pool: Optional[ConnectionPool] = None


def get_redis_pool(url: Optional[str] = None) -> ConnectionPool:
    """Create (once) and return the shared connection pool"""
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = ConnectionPool.from_url(
            url or settings.get_redis_url(),
            decode_responses=True  # Auto-decode Redis responses to strings
        )
        logger.info("Redis connection pool created")
    return _redis_pool


def get_redis_client(url: Optional[str] = None) -> Redis:
    """Get Redis client with connection pooling"""
    return Redis(connection_pool=get_redis_pool(url))
