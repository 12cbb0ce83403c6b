"""
Comparative analysis of audit summaries.

Compares the overall and per-category scores of two audits, and builds score
trends for a website over a period.
"""
import calendar
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.models.audit import Audit, AuditStatus
from app.models.summary import AuditCategoryScore, AuditSummary


class TrendPeriod(str, Enum):
    LAST_30_DAYS = "last30days"
    LAST_3_MONTHS = "last3months"
    LAST_YEAR = "lastYear"


@dataclass
class ScoreComparison:
    current: int
    previous: int
    change: int
    percent_change: float


@dataclass
class CategoryScoreComparison:
    category: str
    slug: str
    scores: ScoreComparison


@dataclass
class AuditComparison:
    current_audit: Audit
    previous_audit: Audit
    overall_score_comparison: ScoreComparison
    category_comparisons: list[CategoryScoreComparison] = field(default_factory=list)
    improvement_areas: list[str] = field(default_factory=list)
    decline_areas: list[str] = field(default_factory=list)
    time_gap: str = ""


@dataclass
class TrendPoint:
    date: date
    score: int


@dataclass
class TrendAnalysis:
    website_id: UUID
    period: str
    overall_score_trend: list[TrendPoint] = field(default_factory=list)
    category_score_trends: dict[str, list[TrendPoint]] = field(default_factory=dict)
    most_improved_category: str | None = None
    least_improved_category: str | None = None


def compare_scores(current: int, previous: int) -> ScoreComparison:
    change = current - previous
    percent_change = 0.0 if previous == 0 else change / previous * 100
    return ScoreComparison(
        current=current,
        previous=previous,
        change=change,
        percent_change=percent_change,
    )


def describe_time_gap(current: datetime, previous: datetime) -> str:
    days = (_as_utc(current) - _as_utc(previous)).days

    if days < 1:
        return "Less than a day"
    if days == 1:
        return "1 day"
    if days < 7:
        return f"{days} days"
    if days < 14:
        return "1 week"
    if days < 30:
        return f"{days // 7} weeks"
    if days < 60:
        return "1 month"
    if days < 365:
        return f"{days // 30} months"
    if days < 730:
        return "1 year"
    return f"{days // 365} years"


def period_start(period: TrendPeriod, now: datetime) -> datetime:
    if period == TrendPeriod.LAST_3_MONTHS:
        return _subtract_months(now, 3)
    if period == TrendPeriod.LAST_YEAR:
        return _subtract_months(now, 12)
    return now - timedelta(days=30)


def _subtract_months(value: datetime, months: int) -> datetime:
    month_index = value.month - 1 - months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ComparisonService:
    """Service for comparing audits and analyzing score trends."""

    def __init__(self, db: AsyncSession, threshold: int | None = None):
        self.db = db
        self.threshold = threshold if threshold is not None else settings.IMPROVEMENT_THRESHOLD

    async def get_previous_completed_audit(self, audit: Audit) -> Audit | None:
        """The most recent completed audit of the same website created before this one."""
        result = await self.db.execute(
            select(Audit)
            .where(
                Audit.website_id == audit.website_id,
                Audit.id != audit.id,
                Audit.status == AuditStatus.COMPLETED,
                Audit.created_at < audit.created_at,
            )
            .order_by(Audit.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def compare_audits(self, current: Audit, previous: Audit) -> AuditComparison:
        """Compare the summaries of two audits.

        A missing summary counts as an overall score of 0. Categories are
        compared only when both audits scored them.
        """
        current_summary = await self._get_summary(current.id)
        previous_summary = await self._get_summary(previous.id)

        comparison = AuditComparison(
            current_audit=current,
            previous_audit=previous,
            overall_score_comparison=compare_scores(
                current_summary.overall_score if current_summary else 0,
                previous_summary.overall_score if previous_summary else 0,
            ),
            time_gap=describe_time_gap(current.created_at, previous.created_at),
        )

        current_scores = self._scores_by_slug(current_summary)
        previous_scores = self._scores_by_slug(previous_summary)

        for slug in sorted(current_scores.keys() & previous_scores.keys()):
            current_row = current_scores[slug]
            scores = compare_scores(current_row.score, previous_scores[slug].score)
            comparison.category_comparisons.append(CategoryScoreComparison(
                category=current_row.category.name,
                slug=slug,
                scores=scores,
            ))

            if scores.change > self.threshold:
                comparison.improvement_areas.append(current_row.category.name)
            elif scores.change < -self.threshold:
                comparison.decline_areas.append(current_row.category.name)

        return comparison

    async def analyze_trends(
        self,
        website_id: UUID,
        period: TrendPeriod = TrendPeriod.LAST_30_DAYS,
        now: datetime | None = None,
    ) -> TrendAnalysis | None:
        """Score trends of a website's summarized, completed audits. None if there are none."""
        start = period_start(period, now or datetime.now(timezone.utc))

        result = await self.db.execute(
            select(Audit)
            .where(
                Audit.website_id == website_id,
                Audit.status == AuditStatus.COMPLETED,
                Audit.created_at >= start,
                Audit.summary.has(),
            )
            .options(
                selectinload(Audit.summary)
                .selectinload(AuditSummary.category_scores)
                .selectinload(AuditCategoryScore.category)
            )
            .order_by(Audit.created_at.asc())
            .execution_options(populate_existing=True)
        )
        audits = list(result.scalars().all())
        if not audits:
            return None

        analysis = TrendAnalysis(website_id=website_id, period=period.value)
        category_trends: dict[str, list[TrendPoint]] = defaultdict(list)

        for audit in audits:
            day = _as_utc(audit.created_at).date()
            summary = audit.summary
            analysis.overall_score_trend.append(TrendPoint(date=day, score=summary.overall_score))
            for row in summary.category_scores:
                category_trends[row.category.name].append(TrendPoint(date=day, score=row.score))

        analysis.category_score_trends = dict(category_trends)

        improvements = {
            name: points[-1].score - points[0].score if len(points) >= 2 else 0
            for name, points in analysis.category_score_trends.items()
        }
        if improvements:
            analysis.most_improved_category = max(improvements, key=improvements.get)
            analysis.least_improved_category = min(improvements, key=improvements.get)

        return analysis

    async def _get_summary(self, audit_id: UUID) -> AuditSummary | None:
        result = await self.db.execute(
            select(AuditSummary)
            .where(AuditSummary.audit_id == audit_id)
            .options(
                selectinload(AuditSummary.category_scores).selectinload(AuditCategoryScore.category)
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _scores_by_slug(summary: AuditSummary | None) -> dict[str, AuditCategoryScore]:
        if not summary:
            return {}
        return {row.category.slug: row for row in summary.category_scores}
