"""
User Model

Accounts for admins, therapists, parents and plain users.
"""

from __future__ import annotations

import enum

from sqlalchemy import Boolean, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin


class Role(str, enum.Enum):
    """Account role."""

    ADMIN = "admin"
    USER = "user"
    THERAPIST = "therapist"
    PARENT = "parent"


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin):
    """Registered account.

    The email column holds hex encoded ciphertext. Encryption is deterministic
    so uniqueness and lookups work on the ciphertext directly.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(512), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False, comment="Password hash")
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    role: Mapped[Role] = mapped_column(
        Enum(Role, name="user_role", values_callable=lambda roles: [r.value for r in roles]),
        default=Role.USER,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<User {self.id} role={self.role.value} active={self.is_active}>"
