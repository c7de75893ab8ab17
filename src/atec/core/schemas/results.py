"""
Result Schemas

Pydantic models for questionnaire submission, search and history.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .questionnaire import AnswerDetail, IndicationCategory, ResultDetail


class ResultRecord(BaseModel):
    """Persisted result."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    package_id: UUID
    child_id: UUID | None = None
    created_by: UUID | None = None
    answer: AnswerDetail
    result: ResultDetail
    created_at: datetime
    updated_at: datetime


class ResultCreate(BaseModel):
    """Fields written when persisting a graded sheet."""

    package_id: UUID
    child_id: UUID | None = None
    created_by: UUID | None = None
    answer: AnswerDetail
    result: ResultDetail


class SubmitQuestionnaire(BaseModel):
    """Answer sheet submission."""

    package_id: UUID
    child_id: UUID | None = None
    answers: AnswerDetail


class SubmitQuestionnaireResult(BaseModel):
    """Response for a graded submission."""

    result_id: UUID
    package_id: UUID
    answers: AnswerDetail
    result: ResultDetail
    indication: IndicationCategory
    child_id: UUID | None = None
    created_by: UUID | None = None
    created_at: datetime


class ResultSearch(BaseModel):
    """Admin result search filter."""

    id: UUID | None = None
    package_id: UUID | None = None
    child_id: UUID | None = None
    created_by: UUID | None = None
    limit: int = Field(..., ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class RenderedResult(BaseModel):
    """Rendered result card."""

    content_type: str
    content: bytes
