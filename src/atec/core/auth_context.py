"""
Authorization Context

The authenticated principal carried by a request, and the policy predicates
services use to decide on it. A missing principal (None) means anonymous.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import UUID

from atec.core.errors import UsecaseError
from atec.core.models import Role

if TYPE_CHECKING:
    from atec.core.schemas import ChildRecord, ResultRecord


@dataclass(frozen=True)
class Principal:
    """Authenticated requester."""

    user_id: UUID
    role: Role


def is_admin(principal: Principal | None) -> bool:
    return principal is not None and principal.role == Role.ADMIN


def owns_child(principal: Principal | None, child: ChildRecord) -> bool:
    return principal is not None and principal.user_id == child.parent_user_id


def owns_result(principal: Principal | None, result: ResultRecord) -> bool:
    return (
        principal is not None
        and result.created_by is not None
        and result.created_by == principal.user_id
    )


def require_principal(principal: Principal | None) -> Principal:
    """Principal, or Unauthorized when anonymous."""
    if principal is None:
        raise UsecaseError.unauthorized("login required")
    return principal


def require_admin(principal: Principal | None) -> Principal:
    """Admin principal; Unauthorized when anonymous, Forbidden otherwise."""
    principal = require_principal(principal)
    if not is_admin(principal):
        raise UsecaseError.forbidden("admin only")
    return principal
