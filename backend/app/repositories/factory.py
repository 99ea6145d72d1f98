# backend/app/repositories/factory.py
"""
Repository Factory for the booking platform

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .availability_repository import AvailabilityRepository
    from .booking_repository import BookingRepository
    from .conflict_checker_repository import ConflictCheckerRepository
    from .login_attempt_repository import LoginAttemptRepository
    from .user_repository import InstructorRepository, UserRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_availability_repository(db: Session) -> "AvailabilityRepository":
        """Create repository for global/special availability."""
        from .availability_repository import AvailabilityRepository

        return AvailabilityRepository(db)

    @staticmethod
    def create_conflict_checker_repository(db: Session) -> "ConflictCheckerRepository":
        """Create repository for conflict checking queries."""
        from .conflict_checker_repository import ConflictCheckerRepository

        return ConflictCheckerRepository(db)

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        """Create repository for booking operations."""
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_login_attempt_repository(db: Session) -> "LoginAttemptRepository":
        """Create repository for login attempt tracking."""
        from .login_attempt_repository import LoginAttemptRepository

        return LoginAttemptRepository(db)

    @staticmethod
    def create_user_repository(db: Session) -> "UserRepository":
        """Create repository for users."""
        from .user_repository import UserRepository

        return UserRepository(db)

    @staticmethod
    def create_instructor_repository(db: Session) -> "InstructorRepository":
        """Create repository for instructor profiles."""
        from .user_repository import InstructorRepository

        return InstructorRepository(db)
