"""
Derived summary models. Rebuilt by the summary service on every run.
"""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.models.base import Base, BaseModel


class AuditSummary(Base, BaseModel):
    """Overall score and issue counters of one audit."""

    __tablename__ = "audit_summaries"

    audit_id = Column(
        UUID(as_uuid=True),
        ForeignKey("audits.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    overall_score = Column(Integer, nullable=False, default=0)
    total_pages = Column(Integer, nullable=False, default=0)
    total_issues = Column(Integer, nullable=False, default=0)
    high_severity_issues = Column(Integer, nullable=False, default=0)
    medium_severity_issues = Column(Integer, nullable=False, default=0)
    low_severity_issues = Column(Integer, nullable=False, default=0)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    audit = relationship("Audit", back_populates="summary")
    category_scores = relationship(
        "AuditCategoryScore",
        back_populates="summary",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<AuditSummary {self.audit_id} ({self.overall_score})>"


class AuditCategoryScore(Base, BaseModel):
    """Health score and per-status counts of one category within a summary."""

    __tablename__ = "audit_category_scores"
    __table_args__ = (
        UniqueConstraint("audit_summary_id", "category_id", name="uq_category_score_summary_category"),
    )

    audit_summary_id = Column(
        UUID(as_uuid=True),
        ForeignKey("audit_summaries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    category_id = Column(
        UUID(as_uuid=True),
        ForeignKey("audit_categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    score = Column(Integer, nullable=False, default=100)
    issue_count = Column(Integer, nullable=False, default=0)
    passed_count = Column(Integer, nullable=False, default=0)
    warning_count = Column(Integer, nullable=False, default=0)
    error_count = Column(Integer, nullable=False, default=0)

    # Relationships
    summary = relationship("AuditSummary", back_populates="category_scores")
    category = relationship("AuditCategory")

    def __repr__(self) -> str:
        return f"<AuditCategoryScore {self.category_id} ({self.score})>"
