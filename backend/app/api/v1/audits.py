"""
Audit endpoints: check result intake, summaries and comparisons.
"""
import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import (
    AuditNotFoundError,
    BadRequestError,
    InvalidCheckResultError,
    NotFoundError,
    SummaryPersistenceError,
)
from app.database import get_db
from app.models.audit import Audit
from app.models.summary import AuditSummary
from app.schemas.audit import (
    AuditResponse,
    AuditResultListResponse,
    AuditResultResponse,
    AuditSummaryDetailResponse,
    AuditSummaryResponse,
    CheckResultBatch,
    CheckResultBatchResponse,
    ResultStats,
    SummaryGenerateResponse,
)
from app.schemas.common import MessageResponse, PaginatedResponse
from app.schemas.comparison import AuditComparisonResponse
from app.services.audit_service import AuditService
from app.services.comparison_service import ComparisonService
from app.services.summary_service import SummaryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/audits", tags=["Audits"])


async def get_audit_or_404(audit_id: UUID, db: AsyncSession) -> Audit:
    audit = await AuditService(db).get_by_id(audit_id)
    if not audit:
        raise NotFoundError("Audit")
    return audit


def summary_response(summary: AuditSummary) -> AuditSummaryResponse:
    response = AuditSummaryResponse.model_validate(summary)
    response.category_scores.sort(key=lambda s: s.category.slug)
    return response


@router.post(
    "/{audit_id}/results",
    response_model=CheckResultBatchResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_results(
    audit_id: UUID,
    data: CheckResultBatch,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Store a batch of check results reported by the analyzers."""
    await get_audit_or_404(audit_id, db)

    try:
        rows = await AuditService(db).add_results(audit_id, data.results)
    except InvalidCheckResultError as e:
        raise BadRequestError(e.message)

    await db.commit()
    return CheckResultBatchResponse(audit_id=audit_id, accepted=len(rows))


@router.get("/{audit_id}/results", response_model=AuditResultListResponse)
async def list_results(
    audit_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    category_id: UUID | None = None,
    status: str | None = None,
    severity: str | None = None,
):
    """Get detailed results for an audit, filtered and paginated."""
    await get_audit_or_404(audit_id, db)

    audit_service = AuditService(db)
    results, total = await audit_service.list_results(
        audit_id,
        page=page,
        per_page=per_page,
        category_id=category_id,
        status=status,
        severity=severity,
    )
    stats = await audit_service.result_stats(audit_id)

    return AuditResultListResponse(
        results=PaginatedResponse.create(
            items=[AuditResultResponse.model_validate(r) for r in results],
            total=total,
            page=page,
            per_page=per_page,
        ),
        stats=ResultStats(**stats),
    )


@router.post("/{audit_id}/summary", response_model=SummaryGenerateResponse)
async def generate_summary(
    audit_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Generate or update an audit summary, then mark the audit completed."""
    try:
        summary = await SummaryService(db).generate(audit_id)
    except AuditNotFoundError:
        raise NotFoundError("Audit")
    except InvalidCheckResultError as e:
        raise BadRequestError(e.message)
    except SummaryPersistenceError as e:
        logger.error(f"Error generating summary for audit {audit_id} ({e.stage}): {e.message}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate audit summary",
        )

    audit = await get_audit_or_404(audit_id, db)
    return SummaryGenerateResponse(
        audit=AuditResponse.model_validate(audit),
        summary=summary_response(summary),
    )


@router.post(
    "/{audit_id}/summary/jobs",
    response_model=MessageResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def queue_summary(
    audit_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Queue summary generation on the background worker."""
    await get_audit_or_404(audit_id, db)

    from app.tasks.summary_tasks import generate_audit_summary
    generate_audit_summary.delay(str(audit_id))

    return MessageResponse(message="Summary generation queued")


@router.get("/{audit_id}/summary", response_model=AuditSummaryDetailResponse)
async def get_summary(
    audit_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Get the audit summary with category scores, issue counts and page counts."""
    audit = await get_audit_or_404(audit_id, db)

    detail = await SummaryService(db).get_summary_detail(audit)
    if not detail:
        raise NotFoundError("Summary")

    return AuditSummaryDetailResponse(
        audit=AuditResponse.model_validate(detail.audit),
        summary=summary_response(detail.summary),
        issue_counts=detail.issue_counts,
        page_counts=detail.page_counts,
    )


@router.get("/{audit_id}/compare", response_model=AuditComparisonResponse)
async def compare_audit(
    audit_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    compare_with_id: UUID | None = None,
):
    """Compare an audit with another one, or with the previous completed audit."""
    audit = await get_audit_or_404(audit_id, db)
    comparison_service = ComparisonService(db)

    if compare_with_id:
        previous = await AuditService(db).get_by_id(compare_with_id)
        if not previous:
            raise NotFoundError("Comparison audit")
    else:
        previous = await comparison_service.get_previous_completed_audit(audit)
        if not previous:
            raise NotFoundError("Previous audit")

    comparison = await comparison_service.compare_audits(audit, previous)
    return AuditComparisonResponse.model_validate(comparison)
