# backend/app/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected. The OTP store and the
email transport are process-wide singletons; everything else is built per
request around the request's database session.
"""

from functools import lru_cache
import logging

from fastapi import Depends
from redis import Redis
from sqlalchemy.orm import Session

from ...core.config import settings
from ...services.auth_service import AuthService
from ...services.availability_service import AvailabilityService
from ...services.booking_service import BookingService
from ...services.conflict_checker import ConflictChecker
from ...services.email import EmailService
from ...services.login_rate_limiter import LoginRateLimiter
from ...services.otp_service import OTPService, OTPSweeper
from ...services.otp_store import InMemoryOTPStore, OTPStore, RedisOTPStore
from ...services.password_reset_service import PasswordResetService
from .database import get_db

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_otp_store() -> OTPStore:
    """Get the singleton OTP store selected by settings.otp_backend."""
    if settings.otp_backend == "redis":
        logger.info("Using Redis OTP store")
        return RedisOTPStore(Redis.from_url(settings.redis_url))
    return InMemoryOTPStore()


@lru_cache(maxsize=1)
def get_otp_sweeper() -> OTPSweeper:
    return OTPSweeper(get_otp_store(), settings.otp_sweep_interval_seconds)


def get_otp_service(store: OTPStore = Depends(get_otp_store)) -> OTPService:
    return OTPService(store)


@lru_cache(maxsize=1)
def get_email_service() -> EmailService:
    """Get singleton EmailService (holds the Jinja2 environment and transport)."""
    return EmailService()


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def get_conflict_checker(db: Session = Depends(get_db)) -> ConflictChecker:
    return ConflictChecker(db)


def get_booking_service(
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
) -> BookingService:
    """
    Get booking service instance.

    Args:
        db: Database session
        email_service: Email service for student notifications

    Returns:
        BookingService instance
    """
    return BookingService(
        db,
        email_service=email_service,
        availability_service=AvailabilityService(db),
        conflict_checker=ConflictChecker(db),
    )


def get_login_rate_limiter(db: Session = Depends(get_db)) -> LoginRateLimiter:
    return LoginRateLimiter(db)


def get_auth_service(
    db: Session = Depends(get_db),
    otp_service: OTPService = Depends(get_otp_service),
    email_service: EmailService = Depends(get_email_service),
    rate_limiter: LoginRateLimiter = Depends(get_login_rate_limiter),
) -> AuthService:
    return AuthService(db, otp_service, email_service=email_service, rate_limiter=rate_limiter)


def get_password_reset_service(
    db: Session = Depends(get_db),
    otp_service: OTPService = Depends(get_otp_service),
    email_service: EmailService = Depends(get_email_service),
) -> PasswordResetService:
    return PasswordResetService(db, otp_service, email_service=email_service)
