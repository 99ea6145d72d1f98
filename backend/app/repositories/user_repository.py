# backend/app/repositories/user_repository.py

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.instructor import Instructor
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for users (students, instructors, admins)."""

    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive email lookup."""
        try:
            return self.db.query(User).filter(func.lower(User.email) == email.lower()).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting user by email: {str(e)}")
            raise RepositoryException(f"Failed to get user: {str(e)}")


class InstructorRepository(BaseRepository[Instructor]):
    """Repository for instructor profiles."""

    def __init__(self, db: Session):
        super().__init__(db, Instructor)

    def get_with_user(self, instructor_id: str) -> Optional[Instructor]:
        try:
            return (
                self.db.query(Instructor)
                .options(joinedload(Instructor.user))
                .filter(Instructor.id == instructor_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting instructor {instructor_id}: {str(e)}")
            raise RepositoryException(f"Failed to get instructor: {str(e)}")
