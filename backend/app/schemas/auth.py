# backend/app/schemas/auth.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from ._strict_base import OTP_CODE_PATTERN, StrictModel, StrictRequestModel


class UserCreate(StrictRequestModel):
    """Student self-registration."""

    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    phone: Optional[str] = Field(None, max_length=20)

    @field_validator("first_name", "last_name")
    def strip_names(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v


class UserLogin(StrictRequestModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: str
    email: EmailStr
    first_name: str
    last_name: str
    phone: Optional[str] = None
    role: str
    email_verified: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class Token(StrictModel):
    access_token: str
    token_type: str = "bearer"


class EmailRequest(StrictRequestModel):
    """Body for endpoints that only need an email address."""

    email: EmailStr


class OTPVerifyRequest(StrictRequestModel):
    email: EmailStr
    code: str = Field(..., pattern=OTP_CODE_PATTERN)


class PasswordResetConfirm(StrictRequestModel):
    """Request model for confirming password reset with new password"""

    email: EmailStr
    code: str = Field(..., pattern=OTP_CODE_PATTERN)
    new_password: str = Field(..., min_length=8)
    confirm_password: str


class MessageResponse(StrictModel):
    message: str


class VerifyCodeResponse(StrictModel):
    valid: bool
    message: str
