"""
Website model for audited sites.
"""
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from app.models.base import Base, BaseModel


class Website(Base, BaseModel):
    """A website whose audits are scored and compared over time."""

    __tablename__ = "websites"

    name = Column(String(255), nullable=False)
    url = Column(String(2048), nullable=False, index=True)

    # Relationships
    audits = relationship("Audit", back_populates="website", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Website {self.name} ({self.url})>"
