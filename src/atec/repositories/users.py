"""
User Repository
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import func, select

from atec.core.models import Role, User
from atec.core.schemas import UserCreate, UserRecord

from .base import BaseRepository
from .errors import NotFoundError
from .transaction import TransactionController


class UserRepository(BaseRepository):
    """Persistence for accounts. Emails are passed in already encrypted."""

    async def create(self, data: UserCreate, tx: TransactionController | None = None) -> UserRecord:
        async with self._session("create user", tx) as session:
            user = User(**data.model_dump())
            session.add(user)
            await self._save(session, tx)
            await session.refresh(user)
            return UserRecord.model_validate(user)

    async def find_by_id(self, user_id: UUID) -> UserRecord:
        async with self._session("find user") as session:
            user = await session.scalar(
                select(User).where(User.id == user_id, User.deleted_at.is_(None))
            )
            if user is None:
                raise NotFoundError("user not found")
            return UserRecord.model_validate(user)

    async def find_by_email(self, encrypted_email: str) -> UserRecord:
        async with self._session("find user by email") as session:
            user = await session.scalar(
                select(User).where(User.email == encrypted_email, User.deleted_at.is_(None))
            )
            if user is None:
                raise NotFoundError("user not found")
            return UserRecord.model_validate(user)

    async def update(
        self, user_id: UUID, patch: dict[str, Any], tx: TransactionController | None = None
    ) -> UserRecord:
        async with self._session("update user", tx) as session:
            user = await session.scalar(
                select(User).where(User.id == user_id, User.deleted_at.is_(None))
            )
            if user is None:
                raise NotFoundError("user not found")

            for field, value in patch.items():
                setattr(user, field, value)

            await self._save(session, tx)
            await session.refresh(user)
            return UserRecord.model_validate(user)

    async def count_by_role(self, role: Role) -> int:
        async with self._session("count users") as session:
            count = await session.scalar(
                select(func.count())
                .select_from(User)
                .where(User.role == role, User.deleted_at.is_(None))
            )
            return count or 0

    async def find_first_by_role(self, role: Role) -> UserRecord:
        """Oldest active account holding role."""
        async with self._session("find user by role") as session:
            user = await session.scalar(
                select(User)
                .where(User.role == role, User.is_active.is_(True), User.deleted_at.is_(None))
                .order_by(User.created_at.asc())
                .limit(1)
            )
            if user is None:
                raise NotFoundError(f"no active {role.value} account")
            return UserRecord.model_validate(user)
