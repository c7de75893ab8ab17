"""
Auth Schemas

Pydantic models for sign-up, login and password reset.
"""

from pydantic import BaseModel, EmailStr, Field


class SignupRequest(BaseModel):
    """Schema for account sign-up."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    username: str = Field(..., min_length=1, max_length=100)


class ResendVerificationRequest(BaseModel):
    """Schema for re-sending the sign-up verification mail."""

    email: EmailStr


class LoginRequest(BaseModel):
    """Schema for login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    """Access token issued on login."""

    token: str


class InitResetPasswordRequest(BaseModel):
    """Schema for starting a password reset."""

    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Schema for completing a password reset."""

    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=128)
