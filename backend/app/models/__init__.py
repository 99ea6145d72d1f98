"""
Database models for the booking platform.

- User authentication and roles
- Instructor profiles
- Lesson bookings
- Availability (weekly template + date-ranged overrides)
- Login attempts for throttling
"""

from .availability import GlobalAvailability, SpecialAvailability
from .booking import Booking, BookingStatus, PaymentStatus
from .instructor import Instructor
from .login_attempt import LoginAttempt
from .user import User, UserRole

__all__ = [
    "Booking",
    "BookingStatus",
    "GlobalAvailability",
    "Instructor",
    "LoginAttempt",
    "PaymentStatus",
    "SpecialAvailability",
    "User",
    "UserRole",
]
