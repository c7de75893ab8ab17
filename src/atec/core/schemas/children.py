"""
Child Schemas

Pydantic models for child registration, listing, search and statistics.
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .questionnaire import ResultDetail


class ChildBase(BaseModel):
    """Base child schema with common fields."""

    name: str = Field(..., min_length=1, max_length=200)
    date_of_birth: date
    gender: bool = Field(..., description="true = male, false = female")
    guardian_name: str | None = Field(None, max_length=200)


class ChildCreate(ChildBase):
    """Schema for registering a child."""

    pass


class ChildUpdate(BaseModel):
    """Schema for updating a child (all fields optional)."""

    name: str | None = Field(None, min_length=1, max_length=200)
    date_of_birth: date | None = None
    gender: bool | None = None
    guardian_name: str | None = Field(None, max_length=200)

    @field_validator("name", "date_of_birth", "gender")
    @classmethod
    def reject_null(cls, v):
        """Omit a field to keep it; only guardian_name can be cleared."""
        if v is None:
            raise ValueError("must not be null")
        return v


class ChildRecord(ChildBase):
    """Persisted child."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    parent_user_id: UUID
    created_at: datetime
    updated_at: datetime


class ChildWithParent(ChildRecord):
    """Child listing entry carrying the parent's username."""

    parent_username: str


class ChildSearch(BaseModel):
    """Admin child search filter."""

    parent_user_id: UUID | None = None
    name: str | None = None
    gender: bool | None = None
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class ChildStatistic(BaseModel):
    """One scored result in a child's history."""

    total: int
    created_at: datetime
    detail: ResultDetail
