"""Database configuration and session management.

Provides async SQLAlchemy engine, session factory and the transaction
boundary used by the catalog managers.
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
from sqlalchemy.orm import declarative_base

from shopcatalog.domain.exceptions import StoreError
from shopcatalog.infrastructure.config import settings

# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    pool_pre_ping=True,
)

# Session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

# Base class for models
Base = declarative_base()


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session.

    Yields:
        AsyncSession for database operations.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Run a unit of work and commit it.

    Rolls back on any exception. Store failures are re-raised as
    StoreError; domain errors pass through unchanged.

    Args:
        session: Request-scoped session.

    Yields:
        The same session.

    Raises:
        StoreError: If the database rejects a statement or the commit.
    """
    try:
        yield session
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        raise StoreError("Catalog store operation failed", details={"error": type(e).__name__}) from e
    except BaseException:
        await session.rollback()
        raise


async def create_tables(bind: AsyncEngine | None = None) -> None:
    """Create database tables if they don't exist.

    Args:
        bind: Engine to use (defaults to the application engine).
    """
    # Register the catalog tables on the metadata
    from shopcatalog.catalog import models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
