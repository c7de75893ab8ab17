"""
Auth API Endpoints

Sign-up, verification, login and password reset.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from fastapi import APIRouter, Depends, Query

from atec.api.deps import get_auth_service
from atec.core.schemas import (
    InitResetPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageData,
    ResendVerificationRequest,
    ResetPasswordRequest,
    SignupRequest,
    SuccessResponse,
)
from atec.services import AuthService

router = APIRouter()


@router.post("/signup", response_model=SuccessResponse[MessageData])
async def signup(
    data: SignupRequest, auth: AuthService = Depends(get_auth_service)
) -> SuccessResponse[MessageData]:
    """Register an account; a verification link is mailed to the address."""
    await auth.signup(data)
    return SuccessResponse(
        data=MessageData(message="signup success, please check your email to verify your account")
    )


@router.post("/signup/resend", response_model=SuccessResponse[MessageData])
async def resend_signup_verification(
    data: ResendVerificationRequest, auth: AuthService = Depends(get_auth_service)
) -> SuccessResponse[MessageData]:
    """Mail the verification link again (rate limited per address)."""
    await auth.resend_verification(data)
    return SuccessResponse(data=MessageData(message="verification mail sent"))


@router.get("/verify", response_model=SuccessResponse[MessageData])
async def verify_account(
    validation_token: str = Query(..., min_length=1),
    auth: AuthService = Depends(get_auth_service),
) -> SuccessResponse[MessageData]:
    """Activate the account addressed by the token."""
    await auth.verify(validation_token)
    return SuccessResponse(data=MessageData(message="account verified"))


@router.post("/login", response_model=SuccessResponse[LoginResponse])
async def login(
    data: LoginRequest, auth: AuthService = Depends(get_auth_service)
) -> SuccessResponse[LoginResponse]:
    token = await auth.login(data)
    return SuccessResponse(data=LoginResponse(token=token))


@router.patch("/password", response_model=SuccessResponse[MessageData])
async def init_reset_password(
    data: InitResetPasswordRequest, auth: AuthService = Depends(get_auth_service)
) -> SuccessResponse[MessageData]:
    """Start a password reset.

    Always answers the same way so account existence isn't disclosed.
    """
    await auth.init_reset_password(data)
    return SuccessResponse(
        data=MessageData(message="if the account exists, a reset link has been sent")
    )


@router.post("/password", response_model=SuccessResponse[MessageData])
async def reset_password(
    data: ResetPasswordRequest, auth: AuthService = Depends(get_auth_service)
) -> SuccessResponse[MessageData]:
    await auth.reset_password(data)
    return SuccessResponse(data=MessageData(message="password changed"))
