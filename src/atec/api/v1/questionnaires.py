"""
Questionnaire API Endpoints

Questionnaire initialization, answer submission and result access.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response

from atec.api.deps import (
    get_optional_principal,
    get_principal,
    get_questionnaire_service,
    limit_submissions,
)
from atec.core.auth_context import Principal
from atec.core.schemas import (
    ActivePackage,
    ResultRecord,
    ResultSearch,
    SubmitQuestionnaire,
    SubmitQuestionnaireResult,
    SuccessResponse,
)
from atec.services import QuestionnaireService

router = APIRouter()


@router.get("", response_model=SuccessResponse[ActivePackage])
async def initialize_questionnaire(
    package_id: UUID | None = None,
    questionnaires: QuestionnaireService = Depends(get_questionnaire_service),
) -> SuccessResponse[ActivePackage]:
    """The requested package, or the system default when none is given."""
    return SuccessResponse(data=await questionnaires.initialize(package_id))


@router.post(
    "",
    response_model=SuccessResponse[SubmitQuestionnaireResult],
    dependencies=[Depends(limit_submissions)],
)
async def submit_questionnaire(
    data: SubmitQuestionnaire,
    principal: Principal | None = Depends(get_optional_principal),
    questionnaires: QuestionnaireService = Depends(get_questionnaire_service),
) -> SuccessResponse[SubmitQuestionnaireResult]:
    """Grade an answer sheet. Anonymous unless submitted for a child."""
    return SuccessResponse(data=await questionnaires.submit(principal, data))


@router.get("/results/my", response_model=SuccessResponse[list[ResultRecord]])
async def my_results(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    principal: Principal = Depends(get_principal),
    questionnaires: QuestionnaireService = Depends(get_questionnaire_service),
) -> SuccessResponse[list[ResultRecord]]:
    """Results submitted by the requester or about the requester's children."""
    return SuccessResponse(data=await questionnaires.user_history(principal, limit, offset))


@router.get("/results", response_model=SuccessResponse[list[ResultRecord]])
async def search_results(
    limit: int = Query(..., ge=1, le=100),
    offset: int = Query(0, ge=0),
    id: UUID | None = None,
    package_id: UUID | None = None,
    child_id: UUID | None = None,
    created_by: UUID | None = None,
    principal: Principal | None = Depends(get_optional_principal),
    questionnaires: QuestionnaireService = Depends(get_questionnaire_service),
) -> SuccessResponse[list[ResultRecord]]:
    """Admin search over all results."""
    criteria = ResultSearch(
        id=id,
        package_id=package_id,
        child_id=child_id,
        created_by=created_by,
        limit=limit,
        offset=offset,
    )
    return SuccessResponse(data=await questionnaires.search(principal, criteria))


@router.get(
    "/results/{result_id}",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
)
async def download_result(
    result_id: UUID,
    principal: Principal | None = Depends(get_optional_principal),
    questionnaires: QuestionnaireService = Depends(get_questionnaire_service),
) -> Response:
    """Result card as a PNG image."""
    rendered = await questionnaires.download(principal, result_id)
    return Response(content=rendered.content, media_type=rendered.content_type)
