"""
Comparative analysis schemas.
"""
import datetime
from uuid import UUID

from app.schemas.audit import AuditResponse
from app.schemas.common import BaseSchema


class ScoreComparison(BaseSchema):
    current: int
    previous: int
    change: int
    percent_change: float


class CategoryScoreComparison(BaseSchema):
    category: str
    slug: str
    scores: ScoreComparison


class AuditComparisonResponse(BaseSchema):
    """Score changes between two audits."""

    current_audit: AuditResponse
    previous_audit: AuditResponse
    overall_score_comparison: ScoreComparison
    category_comparisons: list[CategoryScoreComparison] = []
    improvement_areas: list[str] = []
    decline_areas: list[str] = []
    time_gap: str


class TrendPoint(BaseSchema):
    date: datetime.date
    score: int


class TrendAnalysisResponse(BaseSchema):
    """Score history of a website over a period."""

    website_id: UUID
    period: str
    overall_score_trend: list[TrendPoint] = []
    category_score_trends: dict[str, list[TrendPoint]] = {}
    most_improved_category: str | None = None
    least_improved_category: str | None = None
