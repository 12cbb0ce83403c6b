"""
Custom exceptions for AuditScore.

HTTP exceptions are raised by the API layer. Summary generation errors are
raised by the scoring engine and services and carry the audit id and the
stage that failed, so callers can log and retry.
"""
from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """Resource not found exception."""

    def __init__(self, resource: str = "Resource"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found"
        )


class BadRequestError(HTTPException):
    """Bad request exception."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail
        )


class ConflictError(HTTPException):
    """Conflict exception (e.g., duplicate resource)."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail
        )


class SummaryGenerationError(Exception):
    """Base error for a failed summary generation."""

    def __init__(self, audit_id, stage: str, message: str):
        self.audit_id = audit_id
        self.stage = stage
        self.message = message
        super().__init__(f"[audit {audit_id}] {stage}: {message}")


class AuditNotFoundError(SummaryGenerationError):
    """The audit being summarized does not exist."""

    def __init__(self, audit_id):
        super().__init__(audit_id, "lookup", "Audit not found")


class InvalidCheckResultError(SummaryGenerationError):
    """A raw check result was rejected during ingestion."""

    def __init__(self, audit_id, index: int, message: str):
        self.index = index
        super().__init__(audit_id, "ingestion", f"result #{index}: {message}")


class SummaryPersistenceError(SummaryGenerationError):
    """Writing the summary batch or completing the audit failed."""

    def __init__(self, audit_id, stage: str, cause: Exception):
        self.cause = cause
        super().__init__(audit_id, stage, f"{type(cause).__name__}: {cause}")
