"""Database session and engine management."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from accounts import models  # noqa: F401  registers tables on Base.metadata
from accounts.db.base import Base


class Database:
    """Engine and session factory bound to one database URL."""

    def __init__(self, url: str, echo: bool = False) -> None:
        self.url = url
        self.engine = create_async_engine(url, future=True, echo=echo)
        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False, class_=AsyncSession)

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Provide a transactional scope around a series of operations."""

        async with self.session_factory() as session:
            try:
                yield session
            finally:
                await session.close()
