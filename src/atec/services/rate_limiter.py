"""
Rate Limiter

Fixed-window request counter in Redis. Shared by every process, so a limit
holds for the whole deployment rather than per worker.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import redis.asyncio as redis
from redis.exceptions import RedisError

from atec.cache.keys import rate_limit_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one reservation attempt."""

    allowed: bool
    count: int
    retry_after: int


class RedisRateLimiter:
    """Allow at most `limit` reservations per identity per `period` seconds."""

    def __init__(self, client: redis.Redis):
        self._client = client

    async def reserve(self, scope: str, identity: str, *, limit: int, period: int) -> RateLimitDecision:
        """Count one request against (scope, identity).

        Redis failures are logged and the request is allowed.
        """
        key = rate_limit_key(scope, identity)

        try:
            pipe = self._client.pipeline()
            pipe.incr(key)
            pipe.ttl(key)
            count, ttl = await pipe.execute()

            if ttl is None or ttl < 0:
                await self._client.expire(key, period)
                ttl = period
        except RedisError as e:
            logger.error(f"Rate limit check error for {scope}: {e}")
            return RateLimitDecision(allowed=True, count=0, retry_after=0)

        allowed = count <= limit
        if not allowed:
            logger.info(
                f"Rate limit exceeded for {scope}",
                extra={"identity": identity, "count": count, "limit": limit},
            )
        return RateLimitDecision(allowed=allowed, count=count, retry_after=0 if allowed else ttl)
