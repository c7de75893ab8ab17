"""
User API Endpoints
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from fastapi import APIRouter, Depends

from atec.api.deps import get_principal, get_user_service
from atec.core.auth_context import Principal
from atec.core.schemas import SuccessResponse, UserProfile
from atec.services import UserService

router = APIRouter()


@router.get("/me", response_model=SuccessResponse[UserProfile])
async def my_profile(
    principal: Principal = Depends(get_principal),
    users: UserService = Depends(get_user_service),
) -> SuccessResponse[UserProfile]:
    return SuccessResponse(data=await users.profile(principal))
