"""
Child Model

Children registered by a parent account; score histories hang off them.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin


class Child(Base, UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin):
    """Child profile owned by a parent user."""

    __tablename__ = "children"

    parent_user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    gender: Mapped[bool] = mapped_column(Boolean, nullable=False, comment="true = male")
    guardian_name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    def __repr__(self) -> str:
        return f"<Child {self.id} parent={self.parent_user_id}>"
