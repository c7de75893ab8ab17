"""
ATEC SQLAlchemy Models
"""

from .base import Base, SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin
from .children import Child
from .packages import Package
from .results import Result
from .users import Role, User

__all__ = [
    # Base
    "Base",
    "UUIDPrimaryKeyMixin",
    "TimestampMixin",
    "SoftDeleteMixin",
    # Accounts
    "Role",
    "User",
    "Child",
    # Questionnaire
    "Package",
    "Result",
]
