"""
Result Repository
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import Select, or_, select

from atec.core.models import Child, Result
from atec.core.schemas import ResultCreate, ResultRecord, ResultSearch

from .base import BaseRepository
from .errors import NotFoundError
from .transaction import TransactionController


class ResultRepository(BaseRepository):
    """Persistence for graded submissions (append-only)."""

    async def create(
        self, data: ResultCreate, tx: TransactionController | None = None
    ) -> ResultRecord:
        async with self._session("create result", tx) as session:
            payload = data.model_dump(mode="json", include={"answer", "result"})
            result = Result(
                package_id=data.package_id,
                child_id=data.child_id,
                created_by=data.created_by,
                answer=payload["answer"],
                result=payload["result"],
            )
            session.add(result)
            await self._save(session, tx)
            await session.refresh(result)
            return ResultRecord.model_validate(result)

    async def find_by_id(self, result_id: UUID) -> ResultRecord:
        async with self._session("find result") as session:
            result = await session.get(Result, result_id)
            if result is None:
                raise NotFoundError("result not found")
            return ResultRecord.model_validate(result)

    async def search(self, criteria: ResultSearch) -> list[ResultRecord]:
        stmt = select(Result)

        if criteria.id is not None:
            stmt = stmt.where(Result.id == criteria.id)
        if criteria.package_id is not None:
            stmt = stmt.where(Result.package_id == criteria.package_id)
        if criteria.child_id is not None:
            stmt = stmt.where(Result.child_id == criteria.child_id)
        if criteria.created_by is not None:
            stmt = stmt.where(Result.created_by == criteria.created_by)

        stmt = stmt.order_by(Result.created_at.desc()).limit(criteria.limit).offset(criteria.offset)

        return await self._fetch(stmt, "search results")

    async def find_by_user(self, user_id: UUID, limit: int, offset: int) -> list[ResultRecord]:
        """Results submitted by the user or about any of the user's children."""
        own_children = select(Child.id).where(
            Child.parent_user_id == user_id, Child.deleted_at.is_(None)
        )
        stmt = (
            select(Result)
            .where(or_(Result.created_by == user_id, Result.child_id.in_(own_children)))
            .order_by(Result.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return await self._fetch(stmt, "find user history")

    async def find_by_child(self, child_id: UUID, limit: int, offset: int) -> list[ResultRecord]:
        """Results of one child, oldest first."""
        stmt = (
            select(Result)
            .where(Result.child_id == child_id)
            .order_by(Result.created_at.asc(), Result.id.asc())
            .limit(limit)
            .offset(offset)
        )
        return await self._fetch(stmt, "find child results")

    async def _fetch(self, stmt: Select[tuple[Result]], operation: str) -> list[ResultRecord]:
        async with self._session(operation) as session:
            results = (await session.scalars(stmt)).all()

        if not results:
            raise NotFoundError("no results found")
        return [ResultRecord.model_validate(result) for result in results]
