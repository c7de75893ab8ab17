"""
Package Repository

Database access for packages with a Redis read-through cache in front of it.

Every write holds the package's distributed lease for the duration of the
database write and the cache update, so writes to a single package are
serialized across processes and readers never repopulate the cache with a
snapshot older than the last completed write.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import Any
from uuid import UUID

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError
from redis.exceptions import RedisError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from atec.cache import (
    CacheKeeper,
    CacheLookup,
    CacheNilError,
    Lease,
    LockNotAcquiredError,
    LockWaitTooLongError,
)
from atec.cache.keys import ALL_ACTIVE_PACKAGES, package_key
from atec.core.models import Package
from atec.core.schemas import PackageCreate, PackageRecord

from .base import BaseRepository
from .errors import NotFoundError, PackageLockedError, RepositoryError, RepositoryTimeoutError
from .transaction import TransactionController

logger = logging.getLogger(__name__)

# Fields that can't change once a package is locked
CONTENT_FIELDS = frozenset(
    {"name", "questionnaire", "indication_categories", "image_result_attribute_key"}
)

ALL_ACTIVE_LIMIT = 100

_package_list = TypeAdapter(list[PackageRecord])


class PackageRepository(BaseRepository):
    """Persistence and cache coordination for packages."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        cache: CacheKeeper,
        *,
        package_ttl: float = 3600,
        all_active_ttl: float = 600,
        write_lock_retries: int = 5,
    ):
        super().__init__(session_factory)
        self._cache = cache
        self.package_ttl = package_ttl
        self.all_active_ttl = all_active_ttl
        self.write_lock_retries = write_lock_retries

    # ========================================================================
    # WRITES
    # ========================================================================

    async def create(
        self, created_by: UUID, data: PackageCreate, tx: TransactionController | None = None
    ) -> PackageRecord:
        """Insert a package and cache its snapshot."""
        async with self._session("create package", tx) as session:
            package = Package(created_by=created_by, **data.model_dump(mode="json"))
            session.add(package)
            await self._save(session, tx)
            await session.refresh(package)
            record = PackageRecord.model_validate(package)

        # uncommitted rows stay out of the cache; the first read fills it
        if tx is not None:
            return record

        key = package_key(record.id)
        try:
            lease = await self._cache.locker.acquire(key)
        except (LockNotAcquiredError, RedisError) as e:
            logger.warning(f"Skipped caching new package {record.id}: {e}")
            return record

        try:
            await self._quietly(
                self._cache.set_json(key, record, self.package_ttl), f"cache package {record.id}"
            )
        finally:
            await lease.release()

        return record

    async def update(
        self, package_id: UUID, patch: dict[str, Any], tx: TransactionController | None = None
    ) -> PackageRecord:
        """Apply patch (column -> JSON-ready value) to a package.

        Raises:
            NotFoundError: Package absent or deleted
            PackageLockedError: Package is locked and patch touches content or deactivates it
        """
        key = package_key(package_id)
        lease = await self._acquire_for_write(key)

        try:
            await self._quietly(self._cache.delete(key), f"invalidate package {package_id}")

            async with self._session("update package", tx) as session:
                package = await self._get_row(session, package_id)
                was_active = package.is_active

                if package.is_locked and self._touches_locked_fields(package, patch):
                    raise PackageLockedError("package is locked")

                for field, value in patch.items():
                    setattr(package, field, value)

                await self._save(session, tx)
                await session.refresh(package)
                record = PackageRecord.model_validate(package)

            if tx is None:
                await self._quietly(
                    self._cache.set_json(key, record, self.package_ttl),
                    f"cache package {package_id}",
                )
        finally:
            await lease.release()

        if was_active or record.is_active:
            await self._refresh_all_active()

        return record

    async def delete(self, package_id: UUID) -> None:
        """Soft delete an unlocked package.

        Raises:
            NotFoundError: Package absent or already deleted
            PackageLockedError: Package is locked
        """
        key = package_key(package_id)
        lease = await self._acquire_for_write(key)

        try:
            async with self._session("delete package") as session:
                package = await self._get_row(session, package_id)
                if package.is_locked:
                    raise PackageLockedError("package is locked")

                was_active = package.is_active
                package.soft_delete()
                await session.commit()

            await self._quietly(self._cache.set_nil(key), f"mark package {package_id} deleted")
        finally:
            await lease.release()

        if was_active:
            await self._refresh_all_active()

    async def mark_locked(self, package_id: UUID) -> None:
        """Set is_locked (idempotent) and drop the cached snapshots."""
        key = package_key(package_id)
        lease = await self._acquire_for_write(key)

        try:
            async with self._session("lock package") as session:
                package = await self._get_row(session, package_id)
                if not package.is_locked:
                    package.is_locked = True
                    await session.commit()
                    logger.info(f"Package {package_id} locked")

            await self._quietly(
                self._cache.delete(key, ALL_ACTIVE_PACKAGES), f"invalidate package {package_id}"
            )
        finally:
            await lease.release()

    # ========================================================================
    # READS
    # ========================================================================

    async def find_by_id(self, package_id: UUID) -> PackageRecord:
        """Package snapshot, read through the cache.

        Raises:
            NotFoundError: Package absent or deleted (memoized for a short while)
            RepositoryTimeoutError: Waited too long for another reader to fill the cache
        """
        key = package_key(package_id)
        lookup = await self._lookup(key, "package not found")
        if lookup is None:
            return await self._find_by_id_uncached(package_id)

        if lookup.value is not None:
            try:
                return PackageRecord.model_validate_json(lookup.value)
            except SchemaError as e:
                logger.warning(f"Dropping unreadable cache entry {key}: {e}")
                await self._quietly(self._cache.delete(key), f"drop {key}")
                return await self._find_by_id_uncached(package_id)

        if lookup.lease is None:
            raise RepositoryError(f"cache returned neither value nor lease for {key}")
        try:
            try:
                record = await self._find_by_id_uncached(package_id)
            except NotFoundError:
                await self._quietly(self._cache.set_nil(key), f"memoize missing {key}")
                raise

            await self._quietly(
                self._cache.set_json(key, record, self.package_ttl), f"cache package {package_id}"
            )
            return record
        finally:
            await lookup.lease.release()

    async def find_all_active(self) -> list[PackageRecord]:
        """Active packages (oldest first, at most 100), read through the cache."""
        lookup = await self._lookup(ALL_ACTIVE_PACKAGES, "no active package")
        if lookup is None:
            return await self._find_all_active_uncached()

        if lookup.value is not None:
            try:
                return _package_list.validate_json(lookup.value)
            except SchemaError as e:
                logger.warning(f"Dropping unreadable cache entry {ALL_ACTIVE_PACKAGES}: {e}")
                await self._quietly(self._cache.delete(ALL_ACTIVE_PACKAGES), "drop active set")
                return await self._find_all_active_uncached()

        if lookup.lease is None:
            raise RepositoryError(
                f"cache returned neither value nor lease for {ALL_ACTIVE_PACKAGES}"
            )
        try:
            try:
                records = await self._find_all_active_uncached()
            except NotFoundError:
                await self._quietly(self._cache.set_nil(ALL_ACTIVE_PACKAGES), "memoize no active")
                raise

            await self._quietly(
                self._cache.set_json(ALL_ACTIVE_PACKAGES, records, self.all_active_ttl),
                "cache active set",
            )
            return records
        finally:
            await lookup.lease.release()

    async def find_oldest_active_and_locked(self) -> PackageRecord:
        """The system default package."""
        stmt = (
            select(Package)
            .where(
                Package.is_active.is_(True),
                Package.is_locked.is_(True),
                Package.deleted_at.is_(None),
            )
            .order_by(Package.created_at.asc())
            .limit(1)
        )
        async with self._session("find default package") as session:
            package = await session.scalar(stmt)
            if package is None:
                raise NotFoundError("no active and locked package")
            return PackageRecord.model_validate(package)

    async def search(
        self,
        *,
        is_active: bool | None = None,
        is_locked: bool | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[PackageRecord]:
        """Non-deleted packages, oldest first."""
        stmt = select(Package).where(Package.deleted_at.is_(None))
        if is_active is not None:
            stmt = stmt.where(Package.is_active.is_(is_active))
        if is_locked is not None:
            stmt = stmt.where(Package.is_locked.is_(is_locked))
        stmt = stmt.order_by(Package.created_at.asc()).limit(limit).offset(offset)

        async with self._session("search packages") as session:
            packages = (await session.scalars(stmt)).all()

        if not packages:
            raise NotFoundError("no packages found")
        return [PackageRecord.model_validate(package) for package in packages]

    # ========================================================================
    # INTERNALS
    # ========================================================================

    async def _find_by_id_uncached(self, package_id: UUID) -> PackageRecord:
        async with self._session("find package") as session:
            package = await self._get_row(session, package_id)
            return PackageRecord.model_validate(package)

    async def _find_all_active_uncached(self) -> list[PackageRecord]:
        return await self.search(is_active=True, limit=ALL_ACTIVE_LIMIT)

    @staticmethod
    async def _get_row(session: AsyncSession, package_id: UUID) -> Package:
        package = await session.scalar(
            select(Package).where(Package.id == package_id, Package.deleted_at.is_(None))
        )
        if package is None:
            raise NotFoundError("package not found")
        return package

    @staticmethod
    def _touches_locked_fields(package: Package, patch: dict[str, Any]) -> bool:
        if CONTENT_FIELDS.intersection(patch):
            return True
        return package.is_active and patch.get("is_active") is False

    async def _lookup(self, key: str, nil_message: str) -> CacheLookup | None:
        """get_or_lock with the cache's failure modes mapped; None means cache unavailable."""
        try:
            return await self._cache.get_or_lock(key)
        except CacheNilError as e:
            raise NotFoundError(nil_message) from e
        except LockWaitTooLongError as e:
            logger.error(f"Timed out waiting for {key}: {e}")
            raise RepositoryTimeoutError(f"timed out waiting for {key}") from e
        except RedisError as e:
            logger.warning(f"Cache unavailable for {key}, reading database: {e}")
            return None

    async def _acquire_for_write(self, key: str) -> Lease:
        try:
            return await self._cache.locker.acquire(key, retries=self.write_lock_retries)
        except LockNotAcquiredError as e:
            logger.error(f"Could not acquire write lease on {key}")
            raise RepositoryError(f"failed to acquire lock for {key}") from e
        except RedisError as e:
            logger.error(f"Lock service unavailable for {key}: {e}")
            raise RepositoryError(f"failed to acquire lock for {key}") from e

    async def _refresh_all_active(self) -> None:
        """Drop and rebuild the cached active set."""
        await self._quietly(self._cache.delete(ALL_ACTIVE_PACKAGES), "invalidate active set")
        try:
            await self.find_all_active()
        except NotFoundError:
            pass
        except RepositoryError as e:
            logger.warning(f"Failed to rebuild active package cache: {e}")

    @staticmethod
    async def _quietly(operation: Awaitable[None], description: str) -> None:
        """Await a cache write; failures are only reported."""
        try:
            await operation
        except RedisError as e:
            logger.warning(f"Failed to {description}: {e}")
