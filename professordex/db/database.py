"""
Engine, session factory and the request-scoped session dependency.

One AsyncSession backs one HTTP request. Every write the request makes
(entry, owned index, master set summary) goes through that session and is
committed once at the end, or not at all.
"""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from professordex.config import settings
from professordex.models.db import Base


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    # pre-ping so a recycled Postgres connection does not fail the first toggle
    return create_async_engine(url, echo=echo, pool_pre_ping=True)


engine = build_engine(settings.database_url, echo=settings.debug)

async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession] = async_session_factory,
) -> AsyncIterator[AsyncSession]:
    """Open a session that commits on exit and rolls back on a database error."""
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with session_scope() as session:
        yield session


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """For long-lived routes (websocket feeds) that open short sessions themselves."""
    return async_session_factory


async def init_db(target: AsyncEngine = engine) -> None:
    """Create any missing tables. Run once at startup."""
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
