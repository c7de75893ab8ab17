"""
Integration Tests for the Package Lifecycle

The one-way lock transition through the authoring service, against SQLite
and an in-memory Redis.
"""

import pytest

from atec.core.errors import ErrorKind, UsecaseError
from atec.core.schemas import PackageUpdate


class TestLockIsPermanent:
    """Once locked, nothing an admin does unlocks a package."""

    async def test_locked_package_survives_every_authoring_operation(
        self, container, admin_principal, active_package, package_payload
    ):
        packages = container.packages
        await packages.mark_locked(active_package.id)

        with pytest.raises(UsecaseError) as deactivate:
            await packages.change_active_status(admin_principal, active_package.id, False)
        assert deactivate.value.kind == ErrorKind.FORBIDDEN

        reactivated = await packages.change_active_status(admin_principal, active_package.id, True)
        assert reactivated.is_locked

        with pytest.raises(UsecaseError) as update:
            await packages.update(
                admin_principal,
                active_package.id,
                PackageUpdate.model_validate({**package_payload, "name": "Second Edition"}),
            )
        assert update.value.kind == ErrorKind.FORBIDDEN

        with pytest.raises(UsecaseError) as delete:
            await packages.delete(admin_principal, active_package.id)
        assert delete.value.kind == ErrorKind.FORBIDDEN

        await packages.mark_locked(active_package.id)

        found = await packages.find_by_id(active_package.id)
        assert found.is_locked
        assert found.is_active
        assert found.name == active_package.name

    async def test_locked_while_inactive_stays_locked_across_toggles(
        self, container, admin_principal, package_create
    ):
        packages = container.packages
        package = await packages.create(admin_principal, package_create)
        await packages.mark_locked(package.id)

        activated = await packages.change_active_status(admin_principal, package.id, True)
        assert activated.is_active
        assert activated.is_locked

        with pytest.raises(UsecaseError):
            await packages.change_active_status(admin_principal, package.id, False)

        found = await packages.find_by_id(package.id)
        assert found.is_locked
        assert found.is_active
