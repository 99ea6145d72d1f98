# backend/app/services/auth_service.py
"""
Authentication Service for the booking platform

Handles student registration, credential login (gated by the daily
per-origin failure limit) and email verification codes.
"""

import logging
from typing import Dict, Optional

from sqlalchemy.orm import Session

from ..auth import DUMMY_HASH_FOR_TIMING_ATTACK, create_access_token, get_password_hash, verify_password
from ..core.constants import LIMIT_EXCEEDED_PREFIX, OTP_PURPOSE_REGISTRATION
from ..core.exceptions import (
    ConflictException,
    ForbiddenException,
    RateLimitException,
    ServiceException,
    UnauthorizedException,
    ValidationException,
)
from ..models.user import User, UserRole
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from ..schemas.auth import UserCreate
from .base import BaseService
from .email import EmailService
from .login_rate_limiter import LoginRateLimiter
from .otp_service import OTPService

logger = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    Service for authentication operations.

    The rate limiter and OTP service are injected so tests can control the
    clock and the code store.
    """

    def __init__(
        self,
        db: Session,
        otp_service: OTPService,
        email_service: Optional[EmailService] = None,
        rate_limiter: Optional[LoginRateLimiter] = None,
    ):
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.otp_service = otp_service
        self.email_service = email_service or EmailService()
        self.rate_limiter = rate_limiter or LoginRateLimiter(db)

    @BaseService.measure_operation("register_student")
    def register_student(self, user_data: UserCreate) -> User:
        """
        Register a new student account.

        Raises:
            ConflictException: If the email is already registered
        """
        email = user_data.email.lower()
        if self.user_repository.get_by_email(email):
            self.logger.warning(f"Registration attempted with existing email: {email}")
            raise ConflictException("Email already registered", code="EMAIL_EXISTS")

        with self.transaction():
            user = self.user_repository.create(
                email=email,
                hashed_password=get_password_hash(user_data.password),
                first_name=user_data.first_name,
                last_name=user_data.last_name,
                phone=user_data.phone,
                role=UserRole.STUDENT.value,
                email_verified=False,
            )

        self.log_operation("register_student", user_id=user.id)
        return user

    @BaseService.measure_operation("authenticate")
    def authenticate(self, email: str, password: str, ip_address: str) -> Dict[str, str]:
        """
        Check credentials and issue an access token.

        Raises:
            RateLimitException: the (email, ip) pair used up today's attempts;
                the message is "LIMIT_EXCEEDED:<next reset, ISO 8601>"
            UnauthorizedException: wrong credentials (details carry attempts_remaining)
            ForbiddenException: deactivated account
        """
        email = email.lower()
        if self.rate_limiter.has_exceeded_max_attempts(email, ip_address):
            info = self.rate_limiter.get_attempts_info(email, ip_address)
            prometheus_metrics.record_login_result("rate_limited")
            self.logger.warning(f"Login blocked for {email} from {ip_address} until {info.next_reset_time}")
            raise RateLimitException(
                f"{LIMIT_EXCEEDED_PREFIX}:{info.next_reset_time.isoformat()}",
                code=LIMIT_EXCEEDED_PREFIX,
                details={"attempts_remaining": 0, "next_reset_time": info.next_reset_time.isoformat()},
            )

        user = self.user_repository.get_by_email(email)
        if user is not None and user.hashed_password:
            valid = verify_password(password, user.hashed_password)
        else:
            verify_password(password, DUMMY_HASH_FOR_TIMING_ATTACK)
            valid = False

        self.rate_limiter.record_login_attempt(email, ip_address, successful=valid)

        if not valid:
            info = self.rate_limiter.get_attempts_info(email, ip_address)
            prometheus_metrics.record_login_result("invalid_credentials")
            raise UnauthorizedException(
                "Invalid email or password",
                code="INVALID_CREDENTIALS",
                details={"attempts_remaining": info.attempts_remaining},
            )

        if not user.is_active:
            raise ForbiddenException("Account is deactivated", code="ACCOUNT_DEACTIVATED")

        prometheus_metrics.record_login_result("success")
        self.log_operation("login", user_id=user.id)
        token = create_access_token({"sub": user.email, "role": user.role})
        return {"access_token": token, "token_type": "bearer"}

    @BaseService.measure_operation("request_email_verification")
    def request_email_verification(self, email: str) -> None:
        """Issue a registration code and email it. Works before the account exists."""
        email = email.lower()
        user = self.user_repository.get_by_email(email)
        code = self.otp_service.generate_otp(email, OTP_PURPOSE_REGISTRATION)
        try:
            self.email_service.send_otp_email(
                email, code, OTP_PURPOSE_REGISTRATION, first_name=user.first_name if user else None
            )
        except ServiceException as e:
            # the issued code stays valid; the client can request another
            self.logger.error(f"Verification email not sent: {e.message}")

    @BaseService.measure_operation("verify_email")
    def verify_email(self, email: str, code: str) -> bool:
        """
        Consume a registration code and mark the account verified if it exists.

        Raises:
            ValidationException: wrong, expired or missing code
        """
        email = email.lower()
        if not self.otp_service.verify_otp(email, code, OTP_PURPOSE_REGISTRATION):
            raise ValidationException("Invalid or expired verification code", code="INVALID_OTP")

        user = self.user_repository.get_by_email(email)
        if user is not None and not user.email_verified:
            with self.transaction():
                user.email_verified = True
            self.log_operation("verify_email", user_id=user.id)
        return True
