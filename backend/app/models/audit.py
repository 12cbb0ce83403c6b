"""
Audit models: audit runs, crawled pages and raw check results.
"""
from enum import Enum as PyEnum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import relationship

from app.models.base import Base, BaseModel


class AuditStatus(str, PyEnum):
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Audit(Base, BaseModel):
    """Audit run of a website."""

    __tablename__ = "audits"

    website_id = Column(
        UUID(as_uuid=True),
        ForeignKey("websites.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status = Column(
        Enum(AuditStatus),
        default=AuditStatus.QUEUED,
        nullable=False,
    )
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    website = relationship("Website", back_populates="audits")
    pages = relationship("AuditPage", back_populates="audit", cascade="all, delete-orphan")
    results = relationship("AuditResult", back_populates="audit", cascade="all, delete-orphan")
    summary = relationship(
        "AuditSummary",
        back_populates="audit",
        uselist=False,
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Audit {self.id} ({self.status.value})>"


class AuditPage(Base, BaseModel):
    """Page visited during an audit run."""

    __tablename__ = "audit_pages"

    audit_id = Column(
        UUID(as_uuid=True),
        ForeignKey("audits.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    url = Column(String(2048), nullable=False)
    status = Column(String(20), nullable=False, default="completed")

    # Relationships
    audit = relationship("Audit", back_populates="pages")

    def __repr__(self) -> str:
        return f"<AuditPage {self.url} ({self.status})>"


class AuditResult(Base, BaseModel):
    """Outcome of one check in one audit run.

    Status and severity are kept as the raw strings the analyzers reported;
    result ingestion is where they get validated.
    """

    __tablename__ = "audit_results"

    audit_id = Column(
        UUID(as_uuid=True),
        ForeignKey("audits.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    check_id = Column(
        UUID(as_uuid=True),
        ForeignKey("audit_checks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status = Column(String(20), nullable=False)
    severity = Column(String(20), nullable=True)
    message = Column(Text, nullable=True)
    data = Column(JSONB, default=dict)

    # Relationships
    audit = relationship("Audit", back_populates="results")
    check = relationship("AuditCheck")

    def __repr__(self) -> str:
        return f"<AuditResult {self.check_id} ({self.status}/{self.severity})>"
