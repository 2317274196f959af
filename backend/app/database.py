"""
CampFinder Backend — Database Session Management
==================================================

What:  Async SQLAlchemy engine, session factory, declarative base and the
       per-request session dependency.
How:   One pooled engine per process. `get_db_session` hands each request its own
       AsyncSession, commits when the handler returns and rolls back when it raises.

Pool sizing:
    pool_size=20 + max_overflow=10 keeps us at 30 connections at most, well under
    PostgreSQL's default max_connections=100. pool_recycle=3600 retires
    connections hourly; pool_pre_ping catches ones dropped by a DB restart.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import settings


engine = create_async_engine(
    settings.database_url,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=settings.db_pool_pre_ping,
    pool_recycle=3600,
    echo=settings.log_level == "DEBUG",
)

# expire_on_commit=False: responses are serialized after the commit in
# get_db_session, so attributes must stay loaded
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base shared by every ORM model (and by Alembic's metadata)."""
    pass


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    Services only flush; the transaction is committed here once the route
    handler has returned, or rolled back if anything raised.

    Example:
        @router.get("/bootcamps")
        async def list_bootcamps(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def dispose_engine() -> None:
    """Close every pooled connection. Called from the lifespan on shutdown."""
    await engine.dispose()
