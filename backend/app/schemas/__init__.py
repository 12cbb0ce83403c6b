"""
Pydantic schemas for AuditScore API.
"""
from app.schemas.common import (
    BaseSchema,
    IDSchema,
    PaginatedResponse,
    MessageResponse,
)
from app.schemas.catalog import (
    CategoryCreate,
    CheckCreate,
    CategoryResponse,
    CategoryWithChecksResponse,
    CheckResponse,
)
from app.schemas.audit import (
    AuditResponse,
    CheckResultIn,
    CheckResultBatch,
    CheckResultBatchResponse,
    AuditResultResponse,
    ResultStats,
    AuditResultListResponse,
    CategoryScoreResponse,
    AuditSummaryResponse,
    AuditSummaryDetailResponse,
    SummaryGenerateResponse,
)
from app.schemas.comparison import (
    ScoreComparison,
    CategoryScoreComparison,
    AuditComparisonResponse,
    TrendPoint,
    TrendAnalysisResponse,
)

__all__ = [
    # Common
    "BaseSchema",
    "IDSchema",
    "PaginatedResponse",
    "MessageResponse",
    # Catalog
    "CategoryCreate",
    "CheckCreate",
    "CategoryResponse",
    "CategoryWithChecksResponse",
    "CheckResponse",
    # Audit
    "AuditResponse",
    "CheckResultIn",
    "CheckResultBatch",
    "CheckResultBatchResponse",
    "AuditResultResponse",
    "ResultStats",
    "AuditResultListResponse",
    "CategoryScoreResponse",
    "AuditSummaryResponse",
    "AuditSummaryDetailResponse",
    "SummaryGenerateResponse",
    # Comparison
    "ScoreComparison",
    "CategoryScoreComparison",
    "AuditComparisonResponse",
    "TrendPoint",
    "TrendAnalysisResponse",
]
