"""
Cache key builders.
"""

from uuid import UUID

ALL_ACTIVE_PACKAGES = "all-active-packages"


def package_key(package_id: UUID) -> str:
    return f"pkg:{package_id}"


def rate_limit_key(scope: str, identity: str) -> str:
    return f"ratelimit:{scope}:{identity}"
