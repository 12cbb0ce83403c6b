"""
Audit, check result and summary schemas.
"""
from datetime import datetime
from uuid import UUID

from pydantic import Field

from app.models.audit import AuditStatus
from app.schemas.catalog import CategoryResponse
from app.schemas.common import BaseSchema, IDSchema, PaginatedResponse


class AuditResponse(IDSchema):
    """Audit response."""

    website_id: UUID
    status: AuditStatus
    started_at: datetime | None
    completed_at: datetime | None
    created_at: datetime


class CheckResultIn(BaseSchema):
    """Raw check outcome reported by an analyzer.

    Status and severity are validated by result ingestion, not here.
    """

    check_id: UUID
    status: str
    severity: str | None = None
    message: str | None = None
    data: dict = {}


class CheckResultBatch(BaseSchema):
    """Batch of check outcomes for one audit run."""

    results: list[CheckResultIn] = Field(min_length=1)


class CheckResultBatchResponse(BaseSchema):
    """Ingestion acknowledgement."""

    audit_id: UUID
    accepted: int


class AuditResultResponse(IDSchema):
    """Stored check result."""

    audit_id: UUID
    check_id: UUID
    status: str
    severity: str | None
    message: str | None
    data: dict | None
    created_at: datetime


class ResultStats(BaseSchema):
    """Result counts grouped by status and by severity."""

    by_status: dict[str, int] = {}
    by_severity: dict[str, int] = {}


class AuditResultListResponse(BaseSchema):
    """Filtered, paginated results with audit-wide stats."""

    results: PaginatedResponse[AuditResultResponse]
    stats: ResultStats


class CategoryScoreResponse(IDSchema):
    """Score of one category within a summary."""

    category_id: UUID
    category: CategoryResponse
    score: int
    issue_count: int
    passed_count: int
    warning_count: int
    error_count: int


class AuditSummaryResponse(IDSchema):
    """Persisted audit summary."""

    audit_id: UUID
    overall_score: int
    total_pages: int
    total_issues: int
    high_severity_issues: int
    medium_severity_issues: int
    low_severity_issues: int
    completed_at: datetime | None
    category_scores: list[CategoryScoreResponse] = []


class AuditSummaryDetailResponse(BaseSchema):
    """Summary together with issue and page breakdowns."""

    audit: AuditResponse
    summary: AuditSummaryResponse
    issue_counts: dict[str, int] = {}
    page_counts: dict[str, int] = {}


class SummaryGenerateResponse(BaseSchema):
    """Result of generating or refreshing a summary."""

    audit: AuditResponse
    summary: AuditSummaryResponse
