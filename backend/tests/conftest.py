"""
Pytest configuration and fixtures for AuditScore tests.
"""
import uuid
from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy import JSON
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# IMPORTANT: Patch PostgreSQL types for SQLite compatibility
# Must be done before importing any models
import sqlalchemy.dialects.postgresql as pg_dialect
from sqlalchemy.types import TypeDecorator, CHAR
import uuid as uuid_module

# Custom UUID type that works with SQLite
class SQLiteUUID(TypeDecorator):
    """SQLite-compatible UUID type."""
    impl = CHAR(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is not None:
            return uuid_module.UUID(value)
        return value

pg_dialect.JSONB = JSON
pg_dialect.UUID = SQLiteUUID

from app.database import get_db
from app.models.base import Base
from app.models.website import Website
from app.models.audit import Audit, AuditPage, AuditResult, AuditStatus
from app.models.catalog import AuditCategory, AuditCheck

# Use SQLite for testing (in-memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

CATEGORY_SEED = [
    ("SEO", "seo"),
    ("Performance", "performance"),
    ("Accessibility", "accessibility"),
    ("Security", "security"),
    ("Best Practices", "best_practices"),
    ("Mobile", "mobile"),
]

CHECKS_PER_CATEGORY = 4


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_maker(test_engine) -> async_sessionmaker:
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_maker() as session:
        yield session
        await session.rollback()


# ============================================================================
# Sample Data Fixtures
# ============================================================================

@pytest_asyncio.fixture(scope="function")
async def catalog(db_session: AsyncSession) -> dict:
    """Seeded check catalog.

    Returns {"categories": {slug: AuditCategory}, "checks": {slug: [AuditCheck, ...]}}.
    Every category gets CHECKS_PER_CATEGORY checks.
    """
    categories = {}
    checks = {}
    for name, slug in CATEGORY_SEED:
        category = AuditCategory(
            id=uuid.uuid4(),
            name=name,
            slug=slug,
            description=f"{name} checks",
        )
        db_session.add(category)
        categories[slug] = category

        checks[slug] = []
        for i in range(1, CHECKS_PER_CATEGORY + 1):
            check = AuditCheck(
                id=uuid.uuid4(),
                category_id=category.id,
                name=f"{name} check {i}",
                description=f"{name} check number {i}",
                weight=10 * i,
                severity="medium",
            )
            db_session.add(check)
            checks[slug].append(check)

    await db_session.commit()
    return {"categories": categories, "checks": checks}


@pytest_asyncio.fixture(scope="function")
async def website(db_session: AsyncSession) -> Website:
    site = Website(
        id=uuid.UUID("00000000-0000-0000-0000-000000000001"),
        name="Example Website",
        url="https://example.com",
    )
    db_session.add(site)
    await db_session.commit()
    return site


@pytest_asyncio.fixture(scope="function")
async def audit(db_session: AsyncSession, website: Website) -> Audit:
    run = Audit(
        id=uuid.UUID("00000000-0000-0000-0000-000000000002"),
        website_id=website.id,
        status=AuditStatus.RUNNING,
        started_at=datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc),
        created_at=datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc),
    )
    db_session.add(run)
    db_session.add_all([
        AuditPage(audit_id=run.id, url="https://example.com/", status="completed"),
        AuditPage(audit_id=run.id, url="https://example.com/about", status="completed"),
        AuditPage(audit_id=run.id, url="https://example.com/broken", status="error"),
    ])
    await db_session.commit()
    return run


@pytest.fixture
def add_results(db_session: AsyncSession):
    """Factory that stores raw results: add_results(audit, [(check, status, severity), ...])."""

    async def _add(audit: Audit, outcomes: list[tuple]) -> list[AuditResult]:
        rows = [
            AuditResult(
                audit_id=audit.id,
                check_id=check.id,
                status=status,
                severity=severity,
            )
            for check, status, severity in outcomes
        ]
        db_session.add_all(rows)
        await db_session.commit()
        return rows

    return _add


# ============================================================================
# FastAPI App Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def app(db_session: AsyncSession) -> FastAPI:
    """Create test FastAPI application."""
    from app.main import app as main_app

    async def override_get_db():
        yield db_session

    main_app.dependency_overrides[get_db] = override_get_db

    yield main_app

    main_app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ============================================================================
# Utility Fixtures
# ============================================================================

@pytest.fixture
def weights() -> dict[str, float]:
    """Default category weight table."""
    return {
        "seo": 0.25,
        "performance": 0.25,
        "accessibility": 0.2,
        "security": 0.2,
        "best_practices": 0.1,
    }
