"""Async database session, engine and transaction helper (SQLAlchemy 2.0 + asyncpg)."""
import asyncio
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Optional, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from schedule_engine.config import get_settings

settings = get_settings()

T = TypeVar("T")

# Async engine; use same URL as Alembic (postgresql+asyncpg://...)
engine = create_async_engine(
    settings.database_url,
    echo=settings.sql_echo,
    future=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    """Declarative base for all models."""

    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that yields an async session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def run_in_transaction(
    db: AsyncSession,
    work: Callable[[AsyncSession], Awaitable[T]],
    timeout_seconds: Optional[float] = None,
) -> T:
    """
    Run `work(db)` atomically inside a SAVEPOINT.

    Everything `work` wrote is rolled back if it raises or exceeds `timeout_seconds`;
    the exception propagates. The enclosing transaction is committed by the caller
    (the request-scoped session from get_db).
    """
    async with db.begin_nested():
        if timeout_seconds is None:
            return await work(db)
        return await asyncio.wait_for(work(db), timeout=timeout_seconds)
