"""
Base Repository

Session handling and error translation shared by every repository.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .errors import ConflictError, RepositoryError, RepositoryTimeoutError
from .transaction import TransactionController

logger = logging.getLogger(__name__)


class BaseRepository:
    """Opens a session per call unless the caller passes a transaction."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(
        self, operation: str, tx: TransactionController | None = None
    ) -> AsyncIterator[AsyncSession]:
        try:
            if tx is not None:
                yield tx.handle
            else:
                async with self._session_factory() as session:
                    yield session
        except RepositoryError:
            raise
        except IntegrityError as e:
            logger.warning(f"{operation} violated a constraint: {e.orig}")
            raise ConflictError(f"{operation} conflicts with existing data") from e
        except (TimeoutError, PoolTimeoutError) as e:
            logger.error(f"{operation} timed out: {e}")
            raise RepositoryTimeoutError(f"{operation} timed out") from e
        except SQLAlchemyError as e:
            logger.error(f"{operation} failed: {e}", exc_info=True)
            raise RepositoryError(f"{operation} failed") from e

    @staticmethod
    async def _save(session: AsyncSession, tx: TransactionController | None) -> None:
        """Commit when the session is ours, flush when it belongs to a transaction."""
        if tx is None:
            await session.commit()
        else:
            await session.flush()
