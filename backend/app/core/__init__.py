"""
Core utilities for AuditScore.
"""
from app.core.exceptions import (
    NotFoundError,
    BadRequestError,
    ConflictError,
    SummaryGenerationError,
    AuditNotFoundError,
    InvalidCheckResultError,
    SummaryPersistenceError,
)

__all__ = [
    "NotFoundError",
    "BadRequestError",
    "ConflictError",
    "SummaryGenerationError",
    "AuditNotFoundError",
    "InvalidCheckResultError",
    "SummaryPersistenceError",
]
