import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import BigInteger, Integer
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from core.config import settings

logger = logging.getLogger(__name__)


def _engine_options() -> dict:
    options = {"echo": settings.database_echo}
    # SQLite (tests, local tooling) does not support connection pool sizing
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_pre_ping=True,
        )
    return options


db_engine = create_async_engine(settings.database_url, **_engine_options())


# Create async session maker to be used throughout the application
AsyncSessionLocal = async_sessionmaker(
    db_engine, class_=AsyncSession, expire_on_commit=False
)

# BIGINT identity in Postgres, INTEGER rowid alias in SQLite so autoincrement works
BigIntPK = BigInteger().with_variant(Integer, "sqlite")


# Base class for declarative models
class Base(DeclarativeBase):
    pass


# Dependency to get DB session
async def get_db() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Run a unit of work on ``session``.

    Commits when the block exits normally; rolls back and re-raises on any
    exception so a failed workflow step leaves no partial writes behind.
    """
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise


# Function to initialize the database (create tables)
async def init_db():
    import database.models  # noqa: F401  registers every mapper on Base.metadata

    logger.info("Initializing database schema")
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# Function to close database connections
async def close_db():
    """Close database engine and connections."""
    await db_engine.dispose()
