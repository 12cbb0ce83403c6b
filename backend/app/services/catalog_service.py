"""
Check catalog service for audit categories and checks.
"""
from typing import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.catalog import AuditCategory, AuditCheck
from app.schemas.catalog import CategoryCreate, CheckCreate


class CatalogService:
    """Service for check catalog operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_categories(self, with_checks: bool = False) -> list[AuditCategory]:
        """List all categories ordered by name."""
        query = select(AuditCategory).order_by(AuditCategory.name)
        if with_checks:
            query = query.options(selectinload(AuditCategory.checks)).execution_options(
                populate_existing=True
            )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_category(self, category_id: UUID) -> AuditCategory | None:
        result = await self.db.execute(
            select(AuditCategory).where(AuditCategory.id == category_id)
        )
        return result.scalar_one_or_none()

    async def get_category_by_slug(self, slug: str) -> AuditCategory | None:
        result = await self.db.execute(
            select(AuditCategory).where(AuditCategory.slug == slug)
        )
        return result.scalar_one_or_none()

    async def create_category(self, data: CategoryCreate) -> AuditCategory:
        """Create a new category. Slug uniqueness is checked by the caller."""
        category = AuditCategory(
            name=data.name,
            slug=data.slug,
            description=data.description,
        )
        self.db.add(category)
        await self.db.flush()
        await self.db.refresh(category)
        return category

    async def list_checks(self, category_id: UUID) -> list[AuditCheck]:
        """Checks of a category, heaviest first."""
        result = await self.db.execute(
            select(AuditCheck)
            .where(AuditCheck.category_id == category_id)
            .order_by(AuditCheck.weight.desc(), AuditCheck.name)
        )
        return list(result.scalars().all())

    async def get_checks(self, check_ids: Iterable[UUID]) -> list[AuditCheck]:
        """Fetch the checks with the given IDs; unknown IDs are simply absent."""
        ids = list(check_ids)
        if not ids:
            return []
        result = await self.db.execute(select(AuditCheck).where(AuditCheck.id.in_(ids)))
        return list(result.scalars().all())

    async def create_check(self, category_id: UUID, data: CheckCreate) -> AuditCheck:
        """Create a check in a category."""
        check = AuditCheck(
            category_id=category_id,
            name=data.name,
            description=data.description,
            weight=data.weight,
            severity=data.severity,
        )
        self.db.add(check)
        await self.db.flush()
        await self.db.refresh(check)
        return check
