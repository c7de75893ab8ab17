#!/usr/bin/env python3
"""
Admin Bootstrap

Creates the first admin account from INIT_ADMIN_* environment variables.
Does nothing when an admin already exists.

Usage:
    INIT_ADMIN_EMAIL=admin@example.com INIT_ADMIN_PASSWORD=... python scripts/create_admin.py
    python scripts/create_admin.py --create-tables
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from atec.config import settings
from atec.core.database import create_engine, create_session_factory
from atec.core.models import Base, Role
from atec.core.schemas import UserCreate
from atec.core.security import EmailCipher, hash_password, load_signing_key
from atec.repositories import UserRepository


async def create_tables(engine) -> None:
    """Create all tables if they don't exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("✅ Database tables created/verified")


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Create the initial admin account")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before inserting",
    )
    parser.add_argument(
        "--db-url",
        type=str,
        help="Custom database URL (default from settings)",
    )
    args = parser.parse_args()

    email = os.environ.get("INIT_ADMIN_EMAIL")
    password = os.environ.get("INIT_ADMIN_PASSWORD")
    username = os.environ.get("INIT_ADMIN_USERNAME", "admin")
    if not email or not password:
        print("❌ INIT_ADMIN_EMAIL and INIT_ADMIN_PASSWORD must be set")
        sys.exit(1)

    db_url = args.db_url or settings.DATABASE_URL
    print("🚀 ATEC Admin Bootstrap")
    print(f"🗄️  Database: {db_url.split('@')[1] if '@' in db_url else db_url}\n")

    engine = create_engine(db_url)
    users = UserRepository(create_session_factory(engine))

    try:
        if args.create_tables:
            await create_tables(engine)

        if await users.count_by_role(Role.ADMIN) > 0:
            print("⏭️  Admin account already exists, skipping")
            return

        cipher = EmailCipher(load_signing_key(settings.SIGNING_KEY_PATH), settings.iv)
        admin = await users.create(
            UserCreate(
                email=cipher.encrypt(email),
                password=hash_password(password),
                username=username,
                is_active=True,
                role=Role.ADMIN,
            )
        )
        print(f"✅ Admin account created: {admin.id} ({username})")

    except Exception as e:
        print(f"\n❌ Error: {e}")
        raise
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
