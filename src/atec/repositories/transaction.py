"""
Transaction Controller

Lets a service group several repository writes into one database transaction.
Repositories that receive a controller flush into its session and leave the
commit to the owner of the controller.
"""

from __future__ import annotations

import logging
from types import TracebackType

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .errors import RepositoryError

logger = logging.getLogger(__name__)


class TransactionController:
    """Commit/rollback handle over one session.

    Used as an async context manager; leaving the block without a commit rolls
    back. Rollback runs at most once no matter how many failure paths call it.
    """

    def __init__(self, session: AsyncSession):
        self._session = session
        self._finished = False

    @property
    def handle(self) -> AsyncSession:
        return self._session

    @property
    def finished(self) -> bool:
        return self._finished

    async def commit(self) -> None:
        if self._finished:
            raise RepositoryError("transaction already finished")

        self._finished = True
        try:
            await self._session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Transaction commit failed: {e}")
            await self._session.rollback()
            raise RepositoryError("failed to commit transaction") from e

    async def rollback(self) -> None:
        if self._finished:
            return

        self._finished = True
        try:
            await self._session.rollback()
        except SQLAlchemyError as e:
            logger.error(f"Transaction rollback failed: {e}")

    async def __aenter__(self) -> TransactionController:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            await self.rollback()
        finally:
            await self._session.close()


class TransactionFactory:
    """Creates transaction controllers from the shared session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    def begin(self) -> TransactionController:
        return TransactionController(self._session_factory())
