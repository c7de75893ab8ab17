#!/usr/bin/env python3
"""
Default Package Seeder: JSON → PostgreSQL

Creates the English ATEC package, activates it and (unless --no-lock) locks
it so it becomes the system default questionnaire. Does nothing when an
active package already exists. Requires an admin account, see
scripts/create_admin.py.

Usage:
    python scripts/seed_default_package.py
    python scripts/seed_default_package.py --path=/custom/package.json
    python scripts/seed_default_package.py --no-lock
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from atec.config import settings
from atec.container import build_container
from atec.core.auth_context import Principal
from atec.core.models import Role
from atec.core.schemas import PackageCreate
from atec.repositories import NotFoundError, UserRepository
from atec.repositories.packages import PackageRepository

DEFAULT_PACKAGE_PATH = Path(__file__).parent / "data" / "default_package.json"


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Seed the default ATEC package")
    parser.add_argument(
        "--path",
        type=Path,
        default=DEFAULT_PACKAGE_PATH,
        help="Custom path to package JSON",
    )
    parser.add_argument(
        "--no-lock",
        action="store_true",
        help="Leave the package unlocked (it won't be served as the default)",
    )
    args = parser.parse_args()

    print("🚀 ATEC Default Package Seeder")
    print(f"📁 Package: {args.path}\n")

    container = build_container(settings)
    package_service = container.packages
    package_repo: PackageRepository = package_service.packages
    user_repo: UserRepository = container.users.users

    try:
        try:
            existing = await package_repo.search(is_active=True, limit=1)
            print(f"⏭️  Active package already exists ({existing[0].id}), skipping")
            return
        except NotFoundError:
            pass

        try:
            admin = await user_repo.find_first_by_role(Role.ADMIN)
        except NotFoundError:
            print("❌ No admin account found, you might need to create it first")
            sys.exit(1)

        data = PackageCreate.model_validate_json(args.path.read_text(encoding="utf-8"))
        principal = Principal(user_id=admin.id, role=Role.ADMIN)

        package = await package_service.create(principal, data)
        print(f"✅ Package created: {package.id} ({package.name})")

        await package_service.change_active_status(principal, package.id, True)
        print("✅ Package activated")

        if not args.no_lock:
            await package_service.mark_locked(package.id)
            print("🔒 Package locked")

        print("\n✅ Seed complete!")

    except Exception as e:
        print(f"\n❌ Error: {e}")
        raise
    finally:
        await container.close()


if __name__ == "__main__":
    asyncio.run(main())
