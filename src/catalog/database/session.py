"""
Database client with an explicit lifecycle.

`Database` owns the AsyncEngine and the session factory. The application
creates one in its lifespan, stores it on `app.state.database` and disposes it
at shutdown; request handlers receive sessions through `get_db_session`.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, AsyncIterator

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from catalog.config.settings import Settings

from .base import Base

logger = logging.getLogger(__name__)


def engine_options(settings: Settings) -> dict[str, Any]:
    """
    Engine keyword arguments for the configured backend.

    Pool sizing and timeouts only apply to server databases; SQLite uses
    SQLAlchemy's default pool for aiosqlite.
    """
    url = make_url(settings.DATABASE_URL)
    options: dict[str, Any] = {
        "echo": settings.SQLALCHEMY_ECHO,
        "pool_pre_ping": True,
    }
    if url.get_backend_name() == "postgresql":
        options.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            connect_args={
                "connect_timeout": settings.DB_CONNECT_TIMEOUT,
                "options": f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}",
            },
        )
    return options


class Database:
    def __init__(self, url: str, **engine_kwargs: Any):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.DATABASE_URL, **engine_options(settings))

    async def create_schema(self) -> None:
        """Create missing tables. Existing tables are left untouched."""
        # register models on Base.metadata
        from catalog import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("db.schema.ready", extra={"tables": sorted(Base.metadata.tables)})

    async def drop_schema(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("db.engine.disposed", extra={"backend": self.engine.url.get_backend_name()})

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            yield session


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding a session from the application's Database.

    Usage:
        async def endpoint(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
