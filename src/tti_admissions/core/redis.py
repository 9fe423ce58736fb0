"""
Redis Connection

Shared async client backing the per-principal rate limits. Redis is
optional outside production: when it is down, rate limiting keeps working
from process memory and /ready reports the degraded state.
"""

import logging

from redis.asyncio import Redis, from_url
from redis.exceptions import RedisError

from tti_admissions.core.config import settings

logger = logging.getLogger(__name__)

redis_client: Redis | None = None


async def init_redis(url: str | None = None) -> Redis:
    """
    Connect to Redis and verify the connection. Called from the app lifespan.

    Raises:
        RedisError: If the server can't be reached
    """
    global redis_client
    client = from_url(url or settings.redis_url, encoding="utf-8", decode_responses=True)
    try:
        await client.ping()
    except RedisError:
        await client.aclose()
        raise
    redis_client = client
    return redis_client


async def get_redis() -> Redis | None:
    """Return the shared client, or None when Redis was never connected."""
    return redis_client


async def redis_status() -> str:
    """One of "connected", "unavailable" or "disabled", for readiness checks."""
    if redis_client is None:
        return "disabled"
    try:
        await redis_client.ping()
    except RedisError as e:
        logger.warning(f"Redis ping failed: {e}")
        return "unavailable"
    return "connected"


async def close_redis() -> None:
    global redis_client
    if redis_client is not None:
        await redis_client.aclose()
        redis_client = None
