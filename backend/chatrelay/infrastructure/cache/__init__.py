"""
Cache Layer - Redis caching implementations.

Contains async Redis client and the cached message log decorator.
"""

from chatrelay.infrastructure.cache.redis_client import (
    create_redis_client,
    close_redis_client,
)
from chatrelay.infrastructure.cache.cached_message_log import CachedMessageLog

__all__ = [
    "create_redis_client",
    "close_redis_client",
    "CachedMessageLog",
]
