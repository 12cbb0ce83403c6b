"""
Website endpoints: score trends across audits.
"""
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.database import get_db
from app.models.website import Website
from app.schemas.comparison import TrendAnalysisResponse
from app.services.comparison_service import ComparisonService, TrendPeriod

router = APIRouter(prefix="/websites", tags=["Websites"])


@router.get("/{website_id}/trends", response_model=TrendAnalysisResponse)
async def get_trends(
    website_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    period: TrendPeriod = TrendPeriod.LAST_30_DAYS,
):
    """Overall and per-category score trends of a website's completed audits."""
    if not await db.get(Website, website_id):
        raise NotFoundError("Website")

    analysis = await ComparisonService(db).analyze_trends(website_id, period)
    if not analysis:
        raise NotFoundError("Audits for the specified period")

    return TrendAnalysisResponse.model_validate(analysis)
