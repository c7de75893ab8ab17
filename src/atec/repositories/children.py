"""
Child Repository
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import select

from atec.core.models import Child, User
from atec.core.schemas import ChildCreate, ChildRecord, ChildSearch, ChildWithParent

from .base import BaseRepository
from .errors import NotFoundError
from .transaction import TransactionController


class ChildRepository(BaseRepository):
    """Persistence for child profiles. Soft-deleted children are invisible."""

    async def create(
        self, parent_user_id: UUID, data: ChildCreate, tx: TransactionController | None = None
    ) -> ChildRecord:
        async with self._session("create child", tx) as session:
            child = Child(parent_user_id=parent_user_id, **data.model_dump())
            session.add(child)
            await self._save(session, tx)
            await session.refresh(child)
            return ChildRecord.model_validate(child)

    async def find_by_id(self, child_id: UUID) -> ChildRecord:
        async with self._session("find child") as session:
            child = await session.scalar(
                select(Child).where(Child.id == child_id, Child.deleted_at.is_(None))
            )
            if child is None:
                raise NotFoundError("child not found")
            return ChildRecord.model_validate(child)

    async def update(
        self, child_id: UUID, patch: dict[str, Any], tx: TransactionController | None = None
    ) -> ChildRecord:
        async with self._session("update child", tx) as session:
            child = await session.scalar(
                select(Child).where(Child.id == child_id, Child.deleted_at.is_(None))
            )
            if child is None:
                raise NotFoundError("child not found")

            for field, value in patch.items():
                setattr(child, field, value)

            await self._save(session, tx)
            await session.refresh(child)
            return ChildRecord.model_validate(child)

    async def search(self, criteria: ChildSearch) -> list[ChildRecord]:
        stmt = select(Child).where(Child.deleted_at.is_(None))

        if criteria.parent_user_id is not None:
            stmt = stmt.where(Child.parent_user_id == criteria.parent_user_id)
        if criteria.name:
            stmt = stmt.where(Child.name.ilike(f"%{criteria.name}%"))
        if criteria.gender is not None:
            stmt = stmt.where(Child.gender == criteria.gender)

        stmt = stmt.order_by(Child.created_at.desc()).limit(criteria.limit).offset(criteria.offset)

        async with self._session("search children") as session:
            children = (await session.scalars(stmt)).all()

        if not children:
            raise NotFoundError("no children found")
        return [ChildRecord.model_validate(child) for child in children]

    async def find_by_parent(
        self, parent_user_id: UUID, limit: int, offset: int
    ) -> list[ChildWithParent]:
        stmt = (
            select(Child, User.username)
            .join(User, User.id == Child.parent_user_id)
            .where(Child.parent_user_id == parent_user_id, Child.deleted_at.is_(None))
            .order_by(Child.created_at.desc())
            .limit(limit)
            .offset(offset)
        )

        async with self._session("list children") as session:
            rows = (await session.execute(stmt)).all()

        if not rows:
            raise NotFoundError("no children found")

        return [
            ChildWithParent(
                **ChildRecord.model_validate(child).model_dump(), parent_username=username
            )
            for child, username in rows
        ]
