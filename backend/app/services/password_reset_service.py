# backend/app/services/password_reset_service.py
"""
Password Reset Service for the booking platform

Three steps, each its own request:
1. request_password_reset: email a reset code (always reports success)
2. verify_reset_code: confirm the code without consuming it
3. reset_password: consume the code and store the new password
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..auth import get_password_hash
from ..core.constants import OTP_PURPOSE_PASSWORD_RESET
from ..core.exceptions import NotFoundException, ServiceException, ValidationException
from ..repositories import RepositoryFactory
from .base import BaseService
from .email import EmailService
from .otp_service import OTPService

logger = logging.getLogger(__name__)


class PasswordResetService(BaseService):
    """Service for handling password reset operations."""

    def __init__(self, db: Session, otp_service: OTPService, email_service: Optional[EmailService] = None):
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.otp_service = otp_service
        self.email_service = email_service or EmailService()

    @BaseService.measure_operation("request_password_reset")
    def request_password_reset(self, email: str) -> bool:
        """
        Issue and email a reset code if the account exists.

        Always returns True so callers can't discover which emails are registered.
        """
        email = email.lower()
        user = self.user_repository.get_by_email(email)
        if not user:
            self.logger.info("Password reset requested for unknown email")
            return True

        code = self.otp_service.generate_otp(email, OTP_PURPOSE_PASSWORD_RESET)
        try:
            self.email_service.send_otp_email(email, code, OTP_PURPOSE_PASSWORD_RESET, first_name=user.first_name)
        except ServiceException as e:
            self.logger.error(f"Reset email for user {user.id} not sent: {e.message}")

        self.log_operation("request_password_reset", user_id=user.id)
        return True

    @BaseService.measure_operation("verify_reset_code")
    def verify_reset_code(self, email: str, code: str) -> bool:
        """
        Non-destructive check, used by the form before it asks for a new password.

        Raises:
            NotFoundException: unknown email
        """
        email = email.lower()
        if not self.user_repository.get_by_email(email):
            raise NotFoundException("User not found")
        return self.otp_service.check_otp(email, code, OTP_PURPOSE_PASSWORD_RESET)

    @BaseService.measure_operation("reset_password")
    def reset_password(self, email: str, code: str, new_password: str, confirm_password: str) -> None:
        """
        Consume the reset code and set the new password.

        Raises:
            ValidationException: passwords differ, or the code is wrong/expired/used
            NotFoundException: unknown email
        """
        if new_password != confirm_password:
            raise ValidationException("Passwords do not match", code="PASSWORD_MISMATCH")

        email = email.lower()
        user = self.user_repository.get_by_email(email)
        if not user:
            raise NotFoundException("User not found")

        if not self.otp_service.verify_otp(email, code, OTP_PURPOSE_PASSWORD_RESET):
            raise ValidationException("Invalid or expired reset code", code="INVALID_OTP")

        with self.transaction():
            user.hashed_password = get_password_hash(new_password)

        self.log_operation("reset_password", user_id=user.id)
