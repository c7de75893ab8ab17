"""
Persistence Gateway

Repositories for users, children, packages and results, plus transactions.
"""

from .children import ChildRepository
from .errors import (
    ConflictError,
    NotFoundError,
    PackageLockedError,
    RepositoryError,
    RepositoryTimeoutError,
)
from .packages import PackageRepository
from .results import ResultRepository
from .transaction import TransactionController, TransactionFactory
from .users import UserRepository

__all__ = [
    "ChildRepository",
    "PackageRepository",
    "ResultRepository",
    "UserRepository",
    "TransactionController",
    "TransactionFactory",
    "RepositoryError",
    "NotFoundError",
    "RepositoryTimeoutError",
    "ConflictError",
    "PackageLockedError",
]
