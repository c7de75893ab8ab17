"""
Distributed Locker

Time-bounded exclusive leases shared by every process talking to the same Redis.
The expiry bounds how long a crashed holder can block others.
"""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType

import redis.asyncio as redis
from redis.asyncio.lock import Lock
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class LockNotAcquiredError(Exception):
    """Lease is currently held by someone else."""

    def __init__(self, key: str):
        super().__init__(f"failed to acquire lock for {key}")
        self.key = key


class Lease:
    """Handle on an acquired lock; release it when done."""

    def __init__(self, key: str, lock: Lock):
        self.key = key
        self._lock = lock

    async def release(self) -> None:
        """Release the lease.

        A lease that already expired (or was taken over) is only reported.
        """
        try:
            await self._lock.release()
        except RedisError as e:
            logger.warning(f"Failed to release lock {self.key}: {e}")

    async def __aenter__(self) -> Lease:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.release()


class DistributedLocker:
    """Redis lock factory.

    Lock names are "<prefix>:<key>".
    """

    def __init__(
        self,
        client: redis.Redis,
        *,
        prefix: str = "lock",
        default_expiry: float = 10.0,
        retry_delay: float = 0.05,
    ):
        self._client = client
        self.prefix = prefix
        self.default_expiry = default_expiry
        self.retry_delay = retry_delay

    def _name(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    async def acquire(self, key: str, expiry: float | None = None, retries: int = 1) -> Lease:
        """Try to take the lease for key.

        Args:
            key: Resource name
            expiry: Lease lifetime in seconds (default_expiry when None)
            retries: Number of attempts (one by default)

        Returns:
            Lease to be released by the caller

        Raises:
            LockNotAcquiredError: If every attempt found the lease held
        """
        lock = self._client.lock(
            self._name(key),
            timeout=expiry or self.default_expiry,
            blocking=False,
            thread_local=False,
        )

        for attempt in range(max(retries, 1)):
            if attempt:
                await asyncio.sleep(self.retry_delay)
            if await lock.acquire():
                return Lease(key, lock)

        raise LockNotAcquiredError(key)

    async def is_held(self, key: str) -> bool:
        """Check if anyone currently holds the lease for key."""
        return bool(await self._client.exists(self._name(key)))
