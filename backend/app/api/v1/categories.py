"""
Check catalog endpoints.
"""
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError
from app.database import get_db
from app.schemas.catalog import (
    CategoryCreate,
    CategoryResponse,
    CategoryWithChecksResponse,
    CheckCreate,
    CheckResponse,
)
from app.services.catalog_service import CatalogService

router = APIRouter(prefix="/audit-categories", tags=["Check Catalog"])


@router.get("", response_model=list[CategoryWithChecksResponse])
async def list_categories(
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Get all audit categories with their checks."""
    categories = await CatalogService(db).list_categories(with_checks=True)
    return [CategoryWithChecksResponse.model_validate(c) for c in categories]


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    data: CategoryCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create a new audit category."""
    catalog = CatalogService(db)
    if await catalog.get_category_by_slug(data.slug):
        raise ConflictError("Category with this slug already exists")

    category = await catalog.create_category(data)
    await db.commit()
    return CategoryResponse.model_validate(category)


@router.get("/{category_id}/checks", response_model=list[CheckResponse])
async def list_checks(
    category_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Get all checks of a category."""
    catalog = CatalogService(db)
    if not await catalog.get_category(category_id):
        raise NotFoundError("Category")

    checks = await catalog.list_checks(category_id)
    return [CheckResponse.model_validate(c) for c in checks]


@router.post(
    "/{category_id}/checks",
    response_model=CheckResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_check(
    category_id: UUID,
    data: CheckCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create a new check in a category."""
    catalog = CatalogService(db)
    if not await catalog.get_category(category_id):
        raise NotFoundError("Category")

    check = await catalog.create_check(category_id, data)
    await db.commit()
    return CheckResponse.model_validate(check)
