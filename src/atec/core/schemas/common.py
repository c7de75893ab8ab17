"""
Response Envelopes

Every JSON response is wrapped in one of these two shapes.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class SuccessResponse(BaseModel, Generic[T]):
    """Success envelope."""

    status_code: int = 200
    message: str = "success"
    data: T | None = None


class ErrorResponse(BaseModel):
    """Error envelope."""

    status_code: int
    error_code: str
    error_message: str


class MessageData(BaseModel):
    """Plain message payload."""

    message: str
