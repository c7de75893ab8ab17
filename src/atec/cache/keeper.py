"""
Cache Keeper

Read-through cache over Redis. Negative lookups are memoized with the "NIL"
sentinel, and cold keys are recomputed by a single lease holder while everyone
else waits for the value to appear.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import redis.asyncio as redis
from pydantic_core import to_json
from redis.exceptions import RedisError
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_delay,
    wait_exponential,
    wait_random,
)

from .locker import DistributedLocker, Lease, LockNotAcquiredError

logger = logging.getLogger(__name__)

NIL = "NIL"


class CacheKeyNotFoundError(Exception):
    """Key is not cached."""

    pass


class CacheNilError(Exception):
    """Key is cached as known-absent."""

    pass


class LockWaitTooLongError(Exception):
    """Waited the whole budget for another holder to fill the key."""

    pass


class _StillLocked(Exception):
    """Another caller is still recomputing the key."""

    pass


@dataclass
class CacheLookup:
    """Outcome of get_or_lock: either a cached value or a lease on the key.

    The lease holder must recompute the value, store it, and release the lease.
    """

    value: str | None = None
    lease: Lease | None = None

    @property
    def hit(self) -> bool:
        return self.value is not None


class CacheKeeper:
    """Cache operations plus the get-or-lock read-through protocol."""

    def __init__(
        self,
        client: redis.Redis,
        locker: DistributedLocker,
        *,
        default_ttl: float = 3600,
        nil_ttl: float = 60,
        lock_expiry: float = 10,
        wait_budget: float = 15.0,
        backoff_min: float = 0.02,
        backoff_max: float = 0.2,
    ):
        self._client = client
        self.locker = locker
        self.default_ttl = default_ttl
        self.nil_ttl = nil_ttl
        self.lock_expiry = lock_expiry
        self.wait_budget = wait_budget
        self.backoff_min = backoff_min
        self.backoff_max = backoff_max

    async def get(self, key: str) -> str:
        """Cached value for key.

        Raises:
            CacheKeyNotFoundError: Nothing cached
            CacheNilError: Cached as absent
        """
        value = await self._client.get(key)
        if value is None:
            raise CacheKeyNotFoundError(key)
        if isinstance(value, bytes):
            value = value.decode()
        if value == NIL:
            raise CacheNilError(key)
        return value

    async def set(self, key: str, value: str | bytes, ttl: float | None = None) -> None:
        await self._client.set(key, value, ex=timedelta(seconds=ttl or self.default_ttl))

    async def set_json(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Serialize value (pydantic models included) and cache it."""
        await self.set(key, to_json(value), ttl)

    async def set_nil(self, key: str, ttl: float | None = None) -> None:
        """Memoize that key has no backing value."""
        await self.set(key, NIL, ttl or self.nil_ttl)

    async def delete(self, *keys: str) -> None:
        if keys:
            await self._client.delete(*keys)

    async def get_or_lock(self, key: str) -> CacheLookup:
        """Read key, or take the right to recompute it.

        Returns:
            CacheLookup with a value on a hit, or with a lease on a miss

        Raises:
            CacheNilError: Key is memoized as absent
            LockWaitTooLongError: Another holder didn't fill the key within wait_budget
        """
        try:
            return CacheLookup(value=await self.get(key))
        except CacheKeyNotFoundError:
            pass

        lease = await self._try_acquire(key)
        if lease is not None:
            return CacheLookup(lease=lease)

        retrying = AsyncRetrying(
            stop=stop_after_delay(self.wait_budget),
            wait=wait_exponential(multiplier=self.backoff_min, max=self.backoff_max)
            + wait_random(0, self.backoff_min),
            retry=retry_if_exception_type(_StillLocked),
        )
        try:
            return await retrying(self._poll, key)
        except RetryError as e:
            raise LockWaitTooLongError(
                f"waited more than {self.wait_budget}s for {key} to be filled"
            ) from e

    async def _poll(self, key: str) -> CacheLookup:
        try:
            held = await self.locker.is_held(key)
        except RedisError as e:
            logger.warning(f"Failed to check lock for {key}: {e}")
            raise _StillLocked(key) from e

        if held:
            raise _StillLocked(key)

        try:
            return CacheLookup(value=await self.get(key))
        except CacheKeyNotFoundError:
            pass

        lease = await self._try_acquire(key)
        if lease is None:
            raise _StillLocked(key)
        return CacheLookup(lease=lease)

    async def _try_acquire(self, key: str) -> Lease | None:
        try:
            return await self.locker.acquire(key, self.lock_expiry)
        except LockNotAcquiredError:
            return None
