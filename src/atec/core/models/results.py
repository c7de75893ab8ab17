"""
Result Model

Append-only record of one graded answer sheet.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, JSONColumn, TimestampMixin, UUIDPrimaryKeyMixin


class Result(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Graded submission; child and submitter are both optional."""

    __tablename__ = "results"

    package_id: Mapped[UUID] = mapped_column(ForeignKey("packages.id"), nullable=False, index=True)
    child_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("children.id"), nullable=True, index=True
    )
    created_by: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id"), nullable=True, index=True
    )
    answer: Mapped[dict[str, Any]] = mapped_column(JSONColumn, nullable=False)
    result: Mapped[dict[str, Any]] = mapped_column(JSONColumn, nullable=False)

    def __repr__(self) -> str:
        return f"<Result {self.id} package={self.package_id}>"
