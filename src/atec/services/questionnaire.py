"""
Questionnaire Service

End-to-end handling of answer sheets: grading, persisting results, authorizing
result access, rendering result cards and serving packages to respondents.
"""

from __future__ import annotations

import logging
from uuid import UUID

from atec.core.auth_context import (
    Principal,
    is_admin,
    owns_child,
    owns_result,
    require_admin,
    require_principal,
)
from atec.core.background import BackgroundTaskSupervisor
from atec.core.errors import UsecaseError
from atec.core.schemas import (
    ActivePackage,
    ChildRecord,
    RenderedResult,
    ResultCreate,
    ResultRecord,
    ResultSearch,
    SubmitQuestionnaire,
    SubmitQuestionnaireResult,
    indication_for,
    total_score,
)
from atec.repositories import ChildRepository, RepositoryError, ResultRepository

from .errors import usecase_error_from
from .grader import GradingError, ensure_all_questions_answered, grade
from .packages import PackageService
from .result_image import PNG_CONTENT_TYPE, ResultImageRenderer

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class QuestionnaireService:
    """Submission, result access and questionnaire initialization."""

    def __init__(
        self,
        *,
        packages: PackageService,
        results: ResultRepository,
        children: ChildRepository,
        tasks: BackgroundTaskSupervisor,
        renderer: ResultImageRenderer,
        mark_locked_timeout: float = 10.0,
    ):
        self.packages = packages
        self.results = results
        self.children = children
        self.tasks = tasks
        self.renderer = renderer
        self.mark_locked_timeout = mark_locked_timeout

    async def submit(
        self, requester: Principal | None, data: SubmitQuestionnaire
    ) -> SubmitQuestionnaireResult:
        """Grade and record an answer sheet.

        Anonymous submissions are allowed unless the sheet is about a child, in
        which case only the child's parent or an admin may submit it. The first
        result scored with a package locks that package, in the background.
        """
        try:
            ensure_all_questions_answered(data.answers)
        except GradingError as e:
            raise UsecaseError.bad_request(str(e)) from e

        package = await self.packages.find_by_id(data.package_id)
        if not package.is_active:
            raise UsecaseError.bad_request("package is not active")

        try:
            detail = grade(package.questionnaire, data.answers)
        except GradingError as e:
            raise UsecaseError.bad_request(str(e)) from e

        indication = indication_for(package.indication_categories, total_score(detail))

        child_id: UUID | None = None
        if data.child_id is not None:
            principal = require_principal(requester)
            child = await self._find_child(data.child_id)
            if not is_admin(principal) and not owns_child(principal, child):
                raise UsecaseError.forbidden("you are not allowed to submit results for this child")
            child_id = child.id

        try:
            result = await self.results.create(
                ResultCreate(
                    package_id=package.id,
                    child_id=child_id,
                    created_by=requester.user_id if requester else None,
                    answer=data.answers,
                    result=detail,
                )
            )
        except RepositoryError as e:
            raise usecase_error_from(e) from e

        logger.info(
            f"Result {result.id} recorded for package {package.id}",
            extra={"child_id": str(child_id) if child_id else None},
        )

        if not package.is_locked:
            self._schedule_mark_locked(package.id)

        return SubmitQuestionnaireResult(
            result_id=result.id,
            package_id=result.package_id,
            answers=result.answer,
            result=result.result,
            indication=indication,
            child_id=result.child_id,
            created_by=result.created_by,
            created_at=result.created_at,
        )

    async def download(self, requester: Principal | None, result_id: UUID) -> RenderedResult:
        """Render a result card; owned results are visible to the owner and admins only."""
        result = await self._find_result(result_id)

        if result.created_by is not None:
            if requester is None:
                raise UsecaseError.unauthorized("login required to download this result")
            if not owns_result(requester, result) and not is_admin(requester):
                raise UsecaseError.unauthorized("you are not allowed to download this result")

        package = await self.packages.find_by_id(result.package_id)

        content = self.renderer.render(
            keys=package.image_result_attribute_key,
            result=result.result,
            categories=package.indication_categories,
            result_id=result.id,
            submitted_at=result.created_at,
        )
        return RenderedResult(content_type=PNG_CONTENT_TYPE, content=content)

    async def search(
        self, requester: Principal | None, criteria: ResultSearch
    ) -> list[ResultRecord]:
        require_admin(requester)
        self._check_page(criteria.limit, criteria.offset)

        try:
            return await self.results.search(criteria)
        except RepositoryError as e:
            raise usecase_error_from(e, not_found="no results found") from e

    async def user_history(
        self, requester: Principal | None, limit: int, offset: int
    ) -> list[ResultRecord]:
        """Results the requester submitted or that concern the requester's children."""
        principal = require_principal(requester)
        self._check_page(limit, offset)

        try:
            return await self.results.find_by_user(principal.user_id, limit, offset)
        except RepositoryError as e:
            raise usecase_error_from(e, not_found="no results found") from e

    async def initialize(self, package_id: UUID | None = None) -> ActivePackage:
        """The addressed package, or the system default (oldest active and locked)."""
        if package_id is not None:
            package = await self.packages.find_by_id(package_id)
        else:
            package = await self.packages.find_oldest_active_and_locked()

        return ActivePackage.model_validate(package)

    def _schedule_mark_locked(self, package_id: UUID) -> None:
        self.tasks.spawn(
            lambda: self.packages.mark_locked(package_id),
            name=f"mark-locked-{package_id}",
            timeout=self.mark_locked_timeout,
        )

    async def _find_child(self, child_id: UUID) -> ChildRecord:
        try:
            return await self.children.find_by_id(child_id)
        except RepositoryError as e:
            raise usecase_error_from(e, not_found="child not found") from e

    async def _find_result(self, result_id: UUID) -> ResultRecord:
        try:
            return await self.results.find_by_id(result_id)
        except RepositoryError as e:
            raise usecase_error_from(e, not_found="result not found") from e

    @staticmethod
    def _check_page(limit: int, offset: int) -> None:
        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise UsecaseError.bad_request(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        if offset < 0:
            raise UsecaseError.bad_request("offset must not be negative")
