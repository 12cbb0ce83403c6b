"""
Summary service: generates, persists and reads audit summaries.

Generation runs in three steps:
1. compute  - load the audit's results and the catalog, run the pure engine
2. commit   - upsert the summary row and its category score rows as one batch
3. complete - mark the audit completed, only after the batch has committed

Repeated runs for the same audit overwrite the derived rows. Concurrent runs
for one audit are last-writer-wins; callers that need more must serialize
per audit id.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Mapping
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.core.exceptions import AuditNotFoundError, SummaryPersistenceError
from app.models.audit import Audit
from app.models.summary import AuditCategoryScore, AuditSummary
from app.services.audit_service import AuditService
from app.services.catalog_service import CatalogService
from app.services.summary_engine import CategoryTally, SummaryComputation, compute_summary

logger = logging.getLogger(__name__)


@dataclass
class SummaryDetail:
    audit: Audit
    summary: AuditSummary
    issue_counts: dict[str, int]
    page_counts: dict[str, int]


class SummaryService:
    """Service for audit summary operations."""

    def __init__(self, db: AsyncSession, weights: Mapping[str, float] | None = None):
        self.db = db
        self.weights = weights if weights is not None else settings.CATEGORY_WEIGHTS
        self.audits = AuditService(db)
        self.catalog = CatalogService(db)

    async def generate(self, audit_id: UUID) -> AuditSummary:
        """Generate or refresh the summary of an audit and complete the audit."""
        logger.info(f"Generating summary for audit {audit_id}")

        computation = await self.compute(audit_id)
        summary = await self.commit(computation)
        await self.complete_audit(audit_id)

        logger.info(
            f"Summary for audit {audit_id}: overall score {computation.overall_score}, "
            f"{len(computation.category_scores)} categories, {computation.issues.total_issues} issues"
        )
        return await self.get_summary(summary.audit_id)

    async def compute(self, audit_id: UUID) -> SummaryComputation:
        """Load everything the engine needs and compute the summary. Writes nothing."""
        audit = await self.audits.get_by_id(audit_id)
        if not audit:
            raise AuditNotFoundError(audit_id)

        results = await self.audits.get_results(audit_id)
        checks = await self.catalog.get_checks({r.check_id for r in results})
        categories = await self.catalog.list_categories()
        total_pages = await self.audits.count_pages(audit_id)

        return compute_summary(
            audit_id=audit_id,
            raw_results=results,
            checks=checks,
            categories=categories,
            weights=self.weights,
            total_pages=total_pages,
        )

    async def commit(self, computation: SummaryComputation) -> AuditSummary:
        """Upsert the summary and all its category scores in one transaction."""
        try:
            summary = await self._upsert_summary(computation)
            self._replace_category_scores(summary, computation.category_scores)
            await self.db.flush()
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to persist summary for audit {computation.audit_id}: {e}")
            raise SummaryPersistenceError(computation.audit_id, "persistence", e) from e
        return summary

    async def complete_audit(self, audit_id: UUID) -> Audit:
        try:
            audit = await self.audits.get_by_id(audit_id)
            if not audit:
                raise AuditNotFoundError(audit_id)
            await self.audits.mark_completed(audit)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to complete audit {audit_id}: {e}")
            raise SummaryPersistenceError(audit_id, "lifecycle", e) from e
        return audit

    async def get_summary(self, audit_id: UUID) -> AuditSummary | None:
        """Get an audit's summary with category scores and their categories."""
        result = await self.db.execute(
            select(AuditSummary)
            .where(AuditSummary.audit_id == audit_id)
            .options(
                selectinload(AuditSummary.category_scores).selectinload(AuditCategoryScore.category)
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_summary_detail(self, audit: Audit) -> SummaryDetail | None:
        """Summary plus issue counts by severity and page counts by status."""
        summary = await self.get_summary(audit.id)
        if not summary:
            return None

        stats = await self.audits.result_stats(audit.id)
        return SummaryDetail(
            audit=audit,
            summary=summary,
            issue_counts=stats["by_severity"],
            page_counts=await self.audits.page_counts(audit.id),
        )

    async def _upsert_summary(self, computation: SummaryComputation) -> AuditSummary:
        result = await self.db.execute(
            select(AuditSummary)
            .where(AuditSummary.audit_id == computation.audit_id)
            .options(selectinload(AuditSummary.category_scores))
            .execution_options(populate_existing=True)
        )
        summary = result.scalar_one_or_none()
        if summary is None:
            summary = AuditSummary(audit_id=computation.audit_id, category_scores=[])
            self.db.add(summary)

        for key, value in computation.summary_fields().items():
            setattr(summary, key, value)
        summary.completed_at = datetime.now(timezone.utc)
        return summary

    def _replace_category_scores(self, summary: AuditSummary, tallies: list[CategoryTally]) -> None:
        """Overwrite score rows in place; drop rows of categories no longer scored."""
        existing = {row.category_id: row for row in summary.category_scores}
        scored = set()

        for tally in tallies:
            row = existing.get(tally.category_id)
            if row is None:
                row = AuditCategoryScore(category_id=tally.category_id)
                summary.category_scores.append(row)
            row.score = tally.score
            row.issue_count = tally.issue_count
            row.passed_count = tally.passed_count
            row.warning_count = tally.warning_count
            row.error_count = tally.error_count
            scored.add(tally.category_id)

        for category_id, row in existing.items():
            if category_id not in scored:
                summary.category_scores.remove(row)
