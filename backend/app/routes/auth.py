# backend/app/routes/auth.py
"""
Authentication routes.

Thin controllers over AuthService and PasswordResetService: registration,
credential login, email verification codes and the three-step password reset.
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, Request, status

from ..api.dependencies.services import get_auth_service, get_password_reset_service
from ..core.exceptions import ValidationException
from ..schemas.auth import (
    EmailRequest,
    MessageResponse,
    OTPVerifyRequest,
    PasswordResetConfirm,
    Token,
    UserCreate,
    UserLogin,
    UserResponse,
    VerifyCodeResponse,
)
from ..services.auth_service import AuthService
from ..services.login_rate_limiter import get_ip_address
from ..services.password_reset_service import PasswordResetService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user: UserCreate,
    auth_service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """
    Register a new student.

    Raises:
        409: Email already registered
    """
    db_user = await asyncio.to_thread(auth_service.register_student, user)
    return UserResponse.model_validate(db_user)


@router.post("/login", response_model=Token)
async def login(
    request: Request,
    credentials: UserLogin,
    auth_service: AuthService = Depends(get_auth_service),
) -> Token:
    """
    Exchange email and password for an access token.

    Raises:
        401: Invalid credentials (detail.details.attempts_remaining)
        429: Daily attempt limit reached; detail.message is "LIMIT_EXCEEDED:<reset time>"
    """
    result = await asyncio.to_thread(
        auth_service.authenticate, credentials.email, credentials.password, get_ip_address(request)
    )
    return Token(**result)


@router.post("/request-verification", response_model=MessageResponse)
async def request_verification(
    body: EmailRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    await asyncio.to_thread(auth_service.request_email_verification, body.email)
    return MessageResponse(message="Verification code sent")


@router.post("/verify-email", response_model=MessageResponse)
async def verify_email(
    body: OTPVerifyRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    await asyncio.to_thread(auth_service.verify_email, body.email, body.code)
    return MessageResponse(message="Email verified")


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    body: EmailRequest,
    password_reset_service: PasswordResetService = Depends(get_password_reset_service),
) -> MessageResponse:
    """Always succeeds so the endpoint can't be used to discover accounts."""
    await asyncio.to_thread(password_reset_service.request_password_reset, body.email)
    return MessageResponse(message="If an account exists with this email, a reset code has been sent.")


@router.post("/verify-reset-code", response_model=VerifyCodeResponse)
async def verify_reset_code(
    body: OTPVerifyRequest,
    password_reset_service: PasswordResetService = Depends(get_password_reset_service),
) -> VerifyCodeResponse:
    if not await asyncio.to_thread(password_reset_service.verify_reset_code, body.email, body.code):
        raise ValidationException("Invalid or expired reset code", code="INVALID_OTP")
    return VerifyCodeResponse(valid=True, message="Code verified")


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    body: PasswordResetConfirm,
    password_reset_service: PasswordResetService = Depends(get_password_reset_service),
) -> MessageResponse:
    await asyncio.to_thread(
        password_reset_service.reset_password, body.email, body.code, body.new_password, body.confirm_password
    )
    return MessageResponse(message="Password has been reset")
