"""
Package Authoring Service

Admin authoring of questionnaire packages and the one-way lock transition
applied when a package is first used for scoring.
"""

from __future__ import annotations

import logging
from uuid import UUID

from atec.core.auth_context import Principal, require_admin
from atec.core.errors import UsecaseError
from atec.core.schemas import ActivePackage, PackageCreate, PackageRecord, PackageUpdate
from atec.core.validation import ValidationError, validate_package
from atec.repositories import PackageRepository, RepositoryError

from .errors import usecase_error_from

logger = logging.getLogger(__name__)

LOCKED_MESSAGE = "package is locked and can no longer be modified"


class PackageService:
    """Create, update, (de)activate, delete and lock packages."""

    def __init__(self, packages: PackageRepository):
        self.packages = packages

    async def create(self, requester: Principal | None, data: PackageCreate) -> PackageRecord:
        admin = require_admin(requester)
        self._validate(data)

        try:
            package = await self.packages.create(admin.user_id, data)
        except RepositoryError as e:
            raise usecase_error_from(e) from e

        logger.info(f"Package {package.id} created", extra={"created_by": str(admin.user_id)})
        return package

    async def update(
        self, requester: Principal | None, package_id: UUID, data: PackageUpdate
    ) -> PackageRecord:
        require_admin(requester)
        self._validate(data)

        package = await self.find_by_id(package_id)
        if package.is_locked:
            raise UsecaseError.forbidden(LOCKED_MESSAGE)

        try:
            return await self.packages.update(package_id, data.model_dump(mode="json"))
        except RepositoryError as e:
            raise usecase_error_from(e, not_found="package not found", locked=LOCKED_MESSAGE) from e

    async def change_active_status(
        self, requester: Principal | None, package_id: UUID, is_active: bool
    ) -> PackageRecord:
        """Toggle is_active. No-op when unchanged; deactivating a locked package is forbidden."""
        require_admin(requester)

        package = await self.find_by_id(package_id)
        if package.is_active == is_active:
            return package

        if package.is_locked and not is_active:
            raise UsecaseError.forbidden(LOCKED_MESSAGE)

        try:
            return await self.packages.update(package_id, {"is_active": is_active})
        except RepositoryError as e:
            raise usecase_error_from(e, not_found="package not found", locked=LOCKED_MESSAGE) from e

    async def delete(self, requester: Principal | None, package_id: UUID) -> None:
        require_admin(requester)

        package = await self.find_by_id(package_id)
        if package.is_locked:
            raise UsecaseError.forbidden(LOCKED_MESSAGE)

        try:
            await self.packages.delete(package_id)
        except RepositoryError as e:
            raise usecase_error_from(e, not_found="package not found", locked=LOCKED_MESSAGE) from e

        logger.info(f"Package {package_id} deleted")

    async def find_by_id(self, package_id: UUID) -> PackageRecord:
        try:
            return await self.packages.find_by_id(package_id)
        except RepositoryError as e:
            raise usecase_error_from(e, not_found="package not found") from e

    async def find_active(self) -> list[ActivePackage]:
        try:
            packages = await self.packages.find_all_active()
        except RepositoryError as e:
            raise usecase_error_from(
                e, not_found="system still doesn't have any questionnaire to be used yet"
            ) from e

        return [ActivePackage.model_validate(package) for package in packages]

    async def find_oldest_active_and_locked(self) -> PackageRecord:
        try:
            return await self.packages.find_oldest_active_and_locked()
        except RepositoryError as e:
            raise usecase_error_from(e, not_found="no default questionnaire available") from e

    async def mark_locked(self, package_id: UUID) -> None:
        """Lock a package after it scored a result. Internal; idempotent."""
        await self.packages.mark_locked(package_id)

    @staticmethod
    def _validate(data: PackageCreate | PackageUpdate) -> None:
        try:
            validate_package(data)
        except ValidationError as e:
            raise UsecaseError.bad_request(str(e)) from e
