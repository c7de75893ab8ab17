"""
Package Model

An authored ATEC questionnaire with its scoring tables and result-card labels.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, JSONColumn, SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin


class Package(Base, UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin):
    """Questionnaire package.

    Once is_locked is set, content columns are immutable and the row can't be deleted.
    """

    __tablename__ = "packages"

    created_by: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    questionnaire: Mapped[dict[str, Any]] = mapped_column(JSONColumn, nullable=False)
    indication_categories: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONColumn, nullable=False
    )
    image_result_attribute_key: Mapped[dict[str, Any]] = mapped_column(
        JSONColumn, nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    is_locked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Package {self.id} active={self.is_active} locked={self.is_locked}>"
