"""
Check catalog schemas.
"""
from typing import Literal
from uuid import UUID

from pydantic import Field

from app.schemas.common import BaseSchema, IDSchema


class CategoryCreate(BaseSchema):
    """Create audit category request."""

    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=500)
    slug: str = Field(min_length=1, max_length=50, pattern=r"^[a-z0-9_]+$")


class CheckCreate(BaseSchema):
    """Create audit check request."""

    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=500)
    weight: int = Field(ge=1, le=100)
    severity: Literal["low", "medium", "high"] = "medium"


class CheckResponse(IDSchema):
    """Audit check response."""

    category_id: UUID
    name: str
    description: str | None
    weight: int
    severity: str


class CategoryResponse(IDSchema):
    """Audit category response."""

    name: str
    slug: str
    description: str | None


class CategoryWithChecksResponse(CategoryResponse):
    """Audit category with its checks."""

    checks: list[CheckResponse] = []
