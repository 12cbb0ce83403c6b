"""
Database connection and session management for AuditScore.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from app.config import settings
from app.models.base import Base

# Convert sync URL to async
DATABASE_URL = settings.DATABASE_URL.replace(
    "postgresql://", "postgresql+asyncpg://"
)

engine = create_async_engine(
    DATABASE_URL,
    echo=settings.ENVIRONMENT == "development",
    pool_pre_ping=True,
    pool_size=10,
    max_overflow=20,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def task_session_maker() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh session maker for Celery task execution.

    Each task runs in its own event loop and needs its own engine, which is
    disposed before the loop closes.
    """
    task_engine = create_async_engine(DATABASE_URL, pool_pre_ping=True, pool_size=5, max_overflow=10)
    try:
        yield async_sessionmaker(task_engine, class_=AsyncSession, expire_on_commit=False)
    finally:
        await task_engine.dispose()


async def init_db() -> None:
    """Initialize database tables."""
    from app.models.website import Website
    from app.models.audit import Audit, AuditPage, AuditResult
    from app.models.catalog import AuditCategory, AuditCheck
    from app.models.summary import AuditSummary, AuditCategoryScore

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
