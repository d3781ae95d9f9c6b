"""
Redis helper utilities.

The token store and any future shared state go through this module so
that every service builds its Redis client the same way.
"""

from __future__ import annotations

from typing import Optional

from redis.asyncio import Redis

from .settings import settings

_redis_client: Optional[Redis] = None


def get_redis_client() -> Redis:
    """
    Return a lazily-created global Redis client.

    The underlying driver is fully async and should be awaited by callers.
    """
    global _redis_client
    if _redis_client is None:
        _redis_client = Redis.from_url(settings.redis_url, decode_responses=True)
    return _redis_client


async def close_redis_client() -> None:
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


__all__ = ["close_redis_client", "get_redis_client"]
