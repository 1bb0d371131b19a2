"""
Authentication request/response schemas.
Pydantic models for sign-up, sign-in, token refresh and profile management.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from ...db.enums import UserRole
from .common import CamelModel


def _check_password_strength(v: str) -> str:
    if len(v) < 8:
        raise ValueError("Password must be at least 8 characters long")

    if not any(c.isupper() for c in v):
        raise ValueError("Password must contain at least one uppercase letter")

    if not any(c.islower() for c in v):
        raise ValueError("Password must contain at least one lowercase letter")

    if not any(c.isdigit() for c in v):
        raise ValueError("Password must contain at least one digit")

    return v


class SignUpRequest(CamelModel):
    """Request schema for user registration."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password (min 8 characters)")
    role: UserRole = Field(..., description="Account type")
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(default="", max_length=50)
    address: str = Field(default="", max_length=255)
    city: str = Field(default="", max_length=100)
    state: str = Field(default="", max_length=50)
    zip: str = Field(default="", max_length=20)
    country: str = Field(default="", max_length=100)
    institution_name: Optional[str] = Field(None, max_length=255)
    title: Optional[str] = Field(None, max_length=255)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        """Validate password strength."""
        return _check_password_strength(v)

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: UserRole) -> UserRole:
        """Admin accounts cannot be self-registered."""
        if v == UserRole.ADMIN:
            raise ValueError("Admin accounts cannot be created through sign-up")
        return v


class SignInRequest(BaseModel):
    """Request schema for user login."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")


class RefreshTokenRequest(CamelModel):
    """Request schema for token refresh."""

    refresh_token: str = Field(..., description="Refresh token")


class TokenPair(BaseModel):
    """Access/refresh token pair (snake_case on the wire)."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class UserResponse(CamelModel):
    """Safe user response schema (no password or sensitive data)."""

    id: int
    email: str
    role: UserRole
    is_email_verified: bool
    first_name: str
    last_name: str
    phone: str
    address: str
    city: str
    state: str
    zip: str
    country: str
    website: Optional[str] = None
    linkedin_profile: Optional[str] = None
    facebook_profile: Optional[str] = None
    twitter_profile: Optional[str] = None
    instagram_profile: Optional[str] = None
    youtube_profile: Optional[str] = None
    institution_name: Optional[str] = None
    title: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class AuthResponse(TokenPair):
    """Response schema for sign-in."""

    user: UserResponse


class SignUpResponse(AuthResponse):
    """Response schema for sign-up."""

    message: str = "Account created successfully"


class UpdateProfileRequest(CamelModel):
    """Request schema for updating the caller's profile."""

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    zip: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field(None, max_length=100)
    website: Optional[str] = Field(None, max_length=255)
    linkedin_profile: Optional[str] = Field(None, max_length=255)
    facebook_profile: Optional[str] = Field(None, max_length=255)
    twitter_profile: Optional[str] = Field(None, max_length=255)
    instagram_profile: Optional[str] = Field(None, max_length=255)
    youtube_profile: Optional[str] = Field(None, max_length=255)
    institution_name: Optional[str] = Field(None, max_length=255)
    title: Optional[str] = Field(None, max_length=255)


class ForgotPasswordRequest(BaseModel):
    """Request schema for starting a password reset."""

    email: EmailStr


class ResetPasswordRequest(CamelModel):
    """Request schema for completing a password reset."""

    token: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        """Validate new password strength."""
        return _check_password_strength(v)


class VerifyEmailRequest(BaseModel):
    """Request schema for confirming an email address."""

    token: str


class AuthMessageResponse(BaseModel):
    """Response schema for auth actions that only return a message."""

    message: str
