"""
Check catalog models: audit categories and the checks that belong to them.
"""
from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.models.base import Base, BaseModel


class AuditCategory(Base, BaseModel):
    """Scoring category (SEO, Performance, ...). The slug joins to the weight table."""

    __tablename__ = "audit_categories"

    name = Column(String(100), nullable=False)
    slug = Column(String(50), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)

    # Relationships
    checks = relationship("AuditCheck", back_populates="category", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<AuditCategory {self.slug}>"


class AuditCheck(Base, BaseModel):
    """Individual check. Weight and severity are informational only."""

    __tablename__ = "audit_checks"

    category_id = Column(
        UUID(as_uuid=True),
        ForeignKey("audit_categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    weight = Column(Integer, nullable=False, default=1)
    severity = Column(String(20), nullable=False, default="medium")

    # Relationships
    category = relationship("AuditCategory", back_populates="checks")

    def __repr__(self) -> str:
        return f"<AuditCheck {self.name}>"
