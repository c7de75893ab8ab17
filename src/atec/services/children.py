"""
Child Service

Registration and maintenance of child profiles, plus score statistics.
"""

from __future__ import annotations

import logging
from uuid import UUID

from atec.core.auth_context import Principal, is_admin, owns_child, require_admin, require_principal
from atec.core.errors import UsecaseError
from atec.core.models import Role
from atec.core.schemas import (
    ChildCreate,
    ChildRecord,
    ChildSearch,
    ChildStatistic,
    ChildUpdate,
    ChildWithParent,
    total_score,
)
from atec.repositories import ChildRepository, NotFoundError, RepositoryError, ResultRepository

from .errors import usecase_error_from

logger = logging.getLogger(__name__)

STATISTIC_BATCH_SIZE = 100
MAX_PAGE_SIZE = 100


class ChildService:
    """Child profile use cases."""

    def __init__(self, children: ChildRepository, results: ResultRepository):
        self.children = children
        self.results = results

    async def register(self, requester: Principal | None, data: ChildCreate) -> ChildRecord:
        """Register a child under the requester as parent."""
        principal = require_principal(requester)

        try:
            child = await self.children.create(principal.user_id, data)
        except RepositoryError as e:
            raise usecase_error_from(e) from e

        logger.info(f"Child {child.id} registered", extra={"parent": str(principal.user_id)})
        return child

    async def update(
        self, requester: Principal | None, child_id: UUID, data: ChildUpdate
    ) -> ChildRecord:
        """Update a child; only its parent may do so."""
        principal = require_principal(requester)

        child = await self._find(child_id)
        if not owns_child(principal, child):
            raise UsecaseError.forbidden("only the child's parent can update it")

        patch = data.model_dump(exclude_unset=True)
        if not patch:
            raise UsecaseError.bad_request("nothing to update")

        try:
            return await self.children.update(child_id, patch)
        except RepositoryError as e:
            raise usecase_error_from(e, not_found="child not found") from e

    async def list_mine(
        self, requester: Principal | None, limit: int, offset: int
    ) -> list[ChildWithParent]:
        principal = require_principal(requester)
        self._check_page(limit, offset)

        try:
            return await self.children.find_by_parent(principal.user_id, limit, offset)
        except RepositoryError as e:
            raise usecase_error_from(e, not_found="you have no registered children") from e

    async def search(self, requester: Principal | None, criteria: ChildSearch) -> list[ChildRecord]:
        require_admin(requester)
        self._check_page(criteria.limit, criteria.offset)

        try:
            return await self.children.search(criteria)
        except RepositoryError as e:
            raise usecase_error_from(e, not_found="no children found") from e

    async def statistics(self, requester: Principal | None, child_id: UUID) -> list[ChildStatistic]:
        """Every scored result of a child, oldest first.

        Visible to the child's parent, admins and therapists.
        """
        principal = require_principal(requester)

        child = await self._find(child_id)
        if not (
            owns_child(principal, child) or is_admin(principal) or principal.role == Role.THERAPIST
        ):
            raise UsecaseError.forbidden("you are not allowed to see this child's statistics")

        statistics: list[ChildStatistic] = []
        offset = 0
        while True:
            try:
                batch = await self.results.find_by_child(child_id, STATISTIC_BATCH_SIZE, offset)
            except NotFoundError:
                break
            except RepositoryError as e:
                raise usecase_error_from(e) from e

            statistics.extend(
                ChildStatistic(
                    total=total_score(result.result),
                    created_at=result.created_at,
                    detail=result.result,
                )
                for result in batch
            )
            if len(batch) < STATISTIC_BATCH_SIZE:
                break
            offset += STATISTIC_BATCH_SIZE

        if not statistics:
            raise UsecaseError.not_found("child has no results yet")
        return statistics

    async def _find(self, child_id: UUID) -> ChildRecord:
        try:
            return await self.children.find_by_id(child_id)
        except RepositoryError as e:
            raise usecase_error_from(e, not_found="child not found") from e

    @staticmethod
    def _check_page(limit: int, offset: int) -> None:
        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise UsecaseError.bad_request(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        if offset < 0:
            raise UsecaseError.bad_request("offset must not be negative")
