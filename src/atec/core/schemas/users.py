"""
User Schemas

Pydantic models for account records and profile responses.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from atec.core.models import Role


class UserRecord(BaseModel):
    """Persisted user (email still encrypted)."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    password: str
    username: str
    is_active: bool
    role: Role
    created_at: datetime
    updated_at: datetime


class UserCreate(BaseModel):
    """Fields written on sign-up (email already encrypted, password hashed)."""

    email: str
    password: str
    username: str
    role: Role = Role.USER
    is_active: bool = False


class UserProfile(BaseModel):
    """Profile returned to the account owner (email decrypted)."""

    id: UUID
    email: str
    username: str
    role: Role
    is_active: bool
    created_at: datetime
