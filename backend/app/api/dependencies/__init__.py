# backend/app/api/dependencies/__init__.py
"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from .auth import get_current_user, require_admin
from .database import get_db
from .services import (
    get_auth_service,
    get_availability_service,
    get_booking_service,
    get_email_service,
    get_otp_service,
    get_otp_store,
    get_otp_sweeper,
    get_password_reset_service,
)

__all__ = [
    # Auth
    "get_current_user",
    "require_admin",
    # Database
    "get_db",
    # Services
    "get_auth_service",
    "get_availability_service",
    "get_booking_service",
    "get_email_service",
    "get_otp_service",
    "get_otp_store",
    "get_otp_sweeper",
    "get_password_reset_service",
]
