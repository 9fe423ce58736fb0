"""
Rate Limiting Module

Per-principal rate limiting for workflow endpoints using Redis as the
backend. Falls back to in-memory storage if Redis is unavailable.

Decisions (approve/reject) are limited more tightly than scheduling and
deletion so a misbehaving client cannot bulk-decide applications.
"""

import logging
import time

from fastapi import Depends, HTTPException, Request, status
from redis.asyncio import Redis

from tti_admissions.core.auth import Principal, get_current_principal
from tti_admissions.core.redis import get_redis

logger = logging.getLogger(__name__)

DECISION_LIMIT = 10
ACTION_LIMIT = 30
WINDOW_SECONDS = 60

# In-memory rate limit storage (fallback when Redis unavailable)
# Format: {key: [timestamp, ...]}
_memory_store: dict[str, list[float]] = {}


class RateLimitExceeded(HTTPException):
    """Exception raised when rate limit is exceeded."""

    def __init__(self, limit: int, window_seconds: int):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "error": "RATE_LIMIT_EXCEEDED",
                "message": (
                    f"Rate limit exceeded. Maximum {limit} requests "
                    f"per {window_seconds} seconds."
                ),
                "retry_after_seconds": window_seconds,
            },
            headers={"Retry-After": str(window_seconds)},
        )


async def _check_rate_limit_redis(
    client: Redis,
    key: str,
    limit: int,
    window_seconds: int,
) -> bool:
    """
    Check rate limit using Redis.

    Uses a sliding window algorithm with Redis sorted sets.

    Returns:
        True if request is allowed, False if rate limit exceeded
    """
    now = time.time()
    window_start = now - window_seconds

    # Use a pipeline for atomic operations
    pipe = client.pipeline()
    pipe.zremrangebyscore(key, 0, window_start)
    pipe.zcard(key)
    pipe.zadd(key, {str(now): now})
    pipe.expire(key, window_seconds)

    results = await pipe.execute()
    current_count = results[1]

    return current_count < limit


def _check_rate_limit_memory(key: str, limit: int, window_seconds: int) -> bool:
    """
    Check rate limit using in-memory storage.

    Fallback when Redis is unavailable. Note: This doesn't work
    across multiple server instances.
    """
    now = time.time()
    window_start = now - window_seconds

    hits = [ts for ts in _memory_store.get(key, []) if ts > window_start]
    if len(hits) >= limit:
        _memory_store[key] = hits
        return False

    hits.append(now)
    _memory_store[key] = hits
    return True


async def check_rate_limit(key: str, limit: int, window_seconds: int) -> bool:
    """
    Check if a request is within rate limits.

    Tries Redis first, falls back to in-memory storage.

    Args:
        key: Unique key for this rate limit (e.g., "rate_limit:decision:user_123")
        limit: Maximum requests allowed in the window
        window_seconds: Time window in seconds

    Returns:
        True if request is allowed, False if rate limit exceeded
    """
    client = await get_redis()

    if client is not None:
        try:
            return await _check_rate_limit_redis(client, key, limit, window_seconds)
        except Exception as e:
            logger.warning(f"Redis rate limit check failed, using memory: {e}")

    return _check_rate_limit_memory(key, limit, window_seconds)


def rate_limit(scope: str, limit: int, window_seconds: int = WINDOW_SECONDS):
    """
    Dependency factory limiting requests per principal.

    Usage:
        @router.put("/{id}/head-approve", dependencies=[Depends(rate_limit("decision", 10))])
        async def head_approve(...):
            ...

    Args:
        scope: Bucket name shared by the endpoints it guards
        limit: Maximum requests allowed in the window
        window_seconds: Time window in seconds

    Raises:
        RateLimitExceeded: When rate limit is exceeded (HTTP 429)
    """

    async def dependency(
        request: Request,
        principal: Principal = Depends(get_current_principal),
    ) -> None:
        key = f"rate_limit:{scope}:{principal.id}"
        if not await check_rate_limit(key, limit, window_seconds):
            logger.warning(
                f"Rate limit exceeded for {principal} on {request.url.path}: "
                f"{limit}/{window_seconds}s"
            )
            raise RateLimitExceeded(limit, window_seconds)

    return dependency


decision_rate_limit = rate_limit("decision", DECISION_LIMIT)
action_rate_limit = rate_limit("action", ACTION_LIMIT)


__all__ = [
    "RateLimitExceeded",
    "action_rate_limit",
    "check_rate_limit",
    "decision_rate_limit",
    "rate_limit",
]
