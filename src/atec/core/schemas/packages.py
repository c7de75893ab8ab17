"""
Package Schemas

Pydantic models for package authoring requests, responses and cached snapshots.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .questionnaire import ImageResultAttributeKey, IndicationCategory, Questionnaire


class PackageContent(BaseModel):
    """Content-bearing fields of a package (immutable once locked)."""

    name: str = Field(..., max_length=255)
    questionnaire: Questionnaire
    indication_categories: list[IndicationCategory]
    image_result_attribute_key: ImageResultAttributeKey


class PackageCreate(PackageContent):
    """Schema for creating a package."""

    pass


class PackageUpdate(PackageContent):
    """Schema for replacing a package's content."""

    pass


class PackageActivation(BaseModel):
    """Schema for toggling a package's active status."""

    is_active: bool


class PackageRecord(PackageContent):
    """Full package snapshot as stored and cached."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_by: UUID
    is_active: bool
    is_locked: bool
    created_at: datetime
    updated_at: datetime


class PackageCreated(BaseModel):
    """Response for package creation."""

    id: UUID


class ActivePackage(BaseModel):
    """Package as presented to respondents."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    questionnaire: Questionnaire
