import contextlib
import importlib
import os
import pkgutil
from typing import AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

import mentorship_engine.entity
from mentorship_engine.common.base import Base
from mentorship_engine.common.environment_constants import DATABASE_URL


def load_entities() -> list[str]:
    """
    Import every module of `mentorship_engine.entity` so their tables are
    registered on `Base.metadata`.

    Returns:
        list[str]: The imported module names.
    """
    package = mentorship_engine.entity
    names = [
        name
        for _, name, _ in pkgutil.iter_modules(package.__path__, package.__name__ + ".")
    ]
    for name in names:
        importlib.import_module(name)
    return names


class Database:
    """Owns the async engine of the engine's relational store and hands out sessions."""

    def __init__(self, database_url: str | None = None, echo=False, **engine_kwargs):
        """
        Args:
            database_url (str | None): SQLAlchemy async URL; DATABASE_URL is read
                when omitted.
            echo (bool): Log every SQL statement.
            **engine_kwargs: Passed to create_async_engine, e.g. a StaticPool for
                an in-memory SQLite database.

        Raises:
            ValueError: No URL was given and DATABASE_URL is unset.
        """
        self.database_url = database_url or os.getenv(DATABASE_URL)
        if not self.database_url:
            raise ValueError("DATABASE_URL must be set")
        self._engine = create_async_engine(self.database_url, echo=echo, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            bind=self._engine,
            autoflush=False,
            expire_on_commit=False,
        )

    def get_engine(self):
        return self._engine

    async def create_schema(self, reset: bool = False) -> None:
        """
        Create every table of the engine.

        Args:
            reset (bool): Drop the existing schema first. On PostgreSQL the public
                schema is recreated so enum types go away with the tables.
        """
        load_entities()
        async with self._engine.begin() as conn:
            if reset and conn.dialect.name == "postgresql":
                await conn.execute(text("DROP SCHEMA public CASCADE;"))
                await conn.execute(text("CREATE SCHEMA public;"))
            elif reset:
                await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)

    async def close(self):
        """Dispose the connection pool; called on shutdown."""
        await self._engine.dispose()

    @contextlib.asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Yield a session for one request.

        The session is rolled back when the block raises and closed in every
        case. It never commits: each service method commits its own unit of
        work before publishing notifications.
        """
        session: AsyncSession = self._session_factory()
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
