"""
Repository Errors

Failure taxonomy of the persistence gateway. Anything unexpected from the
database driver is wrapped in RepositoryError so callers see a closed set.
"""


class RepositoryError(Exception):
    """Unexpected persistence failure."""

    pass


class NotFoundError(RepositoryError):
    """No (non-deleted) row matches."""

    pass


class RepositoryTimeoutError(RepositoryError):
    """Database or cache coordination took too long."""

    pass


class ConflictError(RepositoryError):
    """Write violates a uniqueness or integrity constraint."""

    pass


class PackageLockedError(RepositoryError):
    """Write would change a locked package."""

    pass
