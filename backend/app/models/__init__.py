"""
SQLAlchemy models for AuditScore.
"""
from app.models.base import Base, BaseModel
from app.models.website import Website
from app.models.audit import Audit, AuditPage, AuditResult, AuditStatus
from app.models.catalog import AuditCategory, AuditCheck
from app.models.summary import AuditSummary, AuditCategoryScore

__all__ = [
    "Base",
    "BaseModel",
    "Website",
    "Audit",
    "AuditPage",
    "AuditResult",
    "AuditStatus",
    "AuditCategory",
    "AuditCheck",
    "AuditSummary",
    "AuditCategoryScore",
]
