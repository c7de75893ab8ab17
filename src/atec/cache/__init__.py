"""
Cache and Distributed Lock

Redis-backed read-through cache with negative memoization and a cross-process lease.
"""

from .keeper import (
    NIL,
    CacheKeeper,
    CacheKeyNotFoundError,
    CacheLookup,
    CacheNilError,
    LockWaitTooLongError,
)
from .locker import DistributedLocker, Lease, LockNotAcquiredError

__all__ = [
    "NIL",
    "CacheKeeper",
    "CacheKeyNotFoundError",
    "CacheLookup",
    "CacheNilError",
    "LockWaitTooLongError",
    "DistributedLocker",
    "Lease",
    "LockNotAcquiredError",
]
