"""
Audit service: audit lookup, lifecycle and check result intake.
"""
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.audit import Audit, AuditPage, AuditResult, AuditStatus
from app.models.catalog import AuditCheck
from app.schemas.audit import CheckResultIn
from app.services.catalog_service import CatalogService
from app.services.summary_engine import ResultStatus, ingest_results

SEVERITY_RANK = case(
    (AuditResult.severity == "high", 3),
    (AuditResult.severity == "medium", 2),
    (AuditResult.severity == "low", 1),
    else_=0,
)


class AuditService:
    """Service for audit operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, audit_id: UUID) -> Audit | None:
        """Get audit by ID."""
        result = await self.db.execute(select(Audit).where(Audit.id == audit_id))
        return result.scalar_one_or_none()

    async def mark_completed(self, audit: Audit) -> Audit:
        """Transition an audit to completed. Only called once its summary is committed."""
        audit.status = AuditStatus.COMPLETED
        audit.completed_at = datetime.now(timezone.utc)
        await self.db.flush()
        return audit

    async def get_results(self, audit_id: UUID) -> list[AuditResult]:
        """All check results of an audit, in insertion order."""
        result = await self.db.execute(
            select(AuditResult)
            .where(AuditResult.audit_id == audit_id)
            .order_by(AuditResult.created_at, AuditResult.id)
        )
        return list(result.scalars().all())

    async def add_results(
        self,
        audit_id: UUID,
        results: list[CheckResultIn],
    ) -> list[AuditResult]:
        """Validate and store a batch of raw check results.

        Raises InvalidCheckResultError if any result has an unknown status or
        references an unknown check; nothing is stored in that case.
        """
        catalog = CatalogService(self.db)
        checks = await catalog.get_checks({r.check_id for r in results})
        categories = await catalog.list_categories()
        ingest_results(audit_id, results, checks, categories)

        rows = [
            AuditResult(
                audit_id=audit_id,
                check_id=r.check_id,
                status=r.status,
                severity=r.severity,
                message=r.message,
                data=r.data,
            )
            for r in results
        ]
        self.db.add_all(rows)
        await self.db.flush()
        return rows

    async def list_results(
        self,
        audit_id: UUID,
        page: int = 1,
        per_page: int = 50,
        category_id: UUID | None = None,
        status: str | None = None,
        severity: str | None = None,
    ) -> tuple[list[AuditResult], int]:
        """List results with filtering and pagination, most severe first."""
        query = select(AuditResult).where(AuditResult.audit_id == audit_id)
        count_query = select(func.count(AuditResult.id)).where(AuditResult.audit_id == audit_id)

        if category_id:
            query = query.join(AuditCheck, AuditResult.check_id == AuditCheck.id).where(
                AuditCheck.category_id == category_id
            )
            count_query = count_query.join(AuditCheck, AuditResult.check_id == AuditCheck.id).where(
                AuditCheck.category_id == category_id
            )
        if status:
            query = query.where(AuditResult.status == status)
            count_query = count_query.where(AuditResult.status == status)
        if severity:
            query = query.where(AuditResult.severity == severity)
            count_query = count_query.where(AuditResult.severity == severity)

        total_result = await self.db.execute(count_query)
        total = total_result.scalar()

        query = query.order_by(SEVERITY_RANK.desc(), AuditResult.created_at.asc())
        query = query.offset((page - 1) * per_page).limit(per_page)
        result = await self.db.execute(query)

        return list(result.scalars().all()), total

    async def result_stats(self, audit_id: UUID) -> dict[str, dict[str, int]]:
        """Result counts by status, and issue counts by severity (passes excluded)."""
        by_status_result = await self.db.execute(
            select(AuditResult.status, func.count(AuditResult.id))
            .where(AuditResult.audit_id == audit_id)
            .group_by(AuditResult.status)
        )
        by_severity_result = await self.db.execute(
            select(AuditResult.severity, func.count(AuditResult.id))
            .where(
                AuditResult.audit_id == audit_id,
                AuditResult.status != ResultStatus.PASSED.value,
                AuditResult.severity.is_not(None),
            )
            .group_by(AuditResult.severity)
        )
        return {
            "by_status": {status: count for status, count in by_status_result.all()},
            "by_severity": {severity: count for severity, count in by_severity_result.all()},
        }

    async def count_pages(self, audit_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(AuditPage.id)).where(AuditPage.audit_id == audit_id)
        )
        return result.scalar() or 0

    async def page_counts(self, audit_id: UUID) -> dict[str, int]:
        """Page counts grouped by crawl status."""
        result = await self.db.execute(
            select(AuditPage.status, func.count(AuditPage.id))
            .where(AuditPage.audit_id == audit_id)
            .group_by(AuditPage.status)
        )
        return {status: count for status, count in result.all()}
