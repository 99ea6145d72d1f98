# backend/app/repositories/__init__.py
"""
Repository Pattern Implementation for the booking platform

This package provides the repository layer for data access,
separating business logic from database queries.

Usage:
    from app.repositories import RepositoryFactory

    # In a service:
    repository = RepositoryFactory.create_conflict_checker_repository(db)
    bookings = repository.get_bookings_for_conflict_check(instructor_id, booking_date)
"""

from .availability_repository import AvailabilityRepository
from .base_repository import BaseRepository, IRepository
from .booking_repository import BookingRepository
from .conflict_checker_repository import ConflictCheckerRepository
from .factory import RepositoryFactory
from .login_attempt_repository import LoginAttemptRepository
from .user_repository import InstructorRepository, UserRepository

__all__ = [
    "AvailabilityRepository",
    "BaseRepository",
    "BookingRepository",
    "ConflictCheckerRepository",
    "IRepository",
    "InstructorRepository",
    "LoginAttemptRepository",
    "RepositoryFactory",
    "UserRepository",
]
