"""
Database Engine and Sessions

Async SQLAlchemy engine and session factory construction.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from atec.config import settings


def create_engine(database_url: str | None = None, **kwargs: Any) -> AsyncEngine:
    """Create the async engine (defaults to settings.DATABASE_URL)."""
    return create_async_engine(
        database_url or settings.DATABASE_URL,
        echo=settings.DEBUG,
        **kwargs,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory shared by all repositories."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
