"""
Repository to use-case error translation.
"""

from __future__ import annotations

import logging

from atec.core.errors import UsecaseError
from atec.repositories import (
    ConflictError,
    NotFoundError,
    PackageLockedError,
    RepositoryError,
    RepositoryTimeoutError,
)

logger = logging.getLogger(__name__)


def usecase_error_from(
    error: RepositoryError,
    *,
    not_found: str | None = None,
    conflict: str | None = None,
    locked: str = "package is locked and can no longer be modified",
) -> UsecaseError:
    """Map a repository failure to what the caller is allowed to see.

    Details of unexpected failures are logged here and replaced by a generic message.
    """
    if isinstance(error, NotFoundError):
        return UsecaseError.not_found(not_found or str(error))
    if isinstance(error, PackageLockedError):
        return UsecaseError.forbidden(locked)
    if isinstance(error, ConflictError):
        return UsecaseError.bad_request(conflict or str(error))
    if isinstance(error, RepositoryTimeoutError):
        logger.error(f"Repository timeout: {error}")
        return UsecaseError.internal()

    logger.error(f"Repository failure: {error}", exc_info=error)
    return UsecaseError.internal()
