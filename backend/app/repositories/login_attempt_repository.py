# backend/app/repositories/login_attempt_repository.py

from datetime import datetime
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.login_attempt import LoginAttempt
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class LoginAttemptRepository(BaseRepository[LoginAttempt]):
    """Append-only store of login attempts, queried by time window."""

    def __init__(self, db: Session):
        super().__init__(db, LoginAttempt)

    def count_failed_since(self, email: str, ip_address: str, since: datetime) -> int:
        """Count failed attempts for the (email, ip) pair at or after `since`."""
        try:
            return (
                self.db.query(LoginAttempt)
                .filter(
                    LoginAttempt.email == email,
                    LoginAttempt.ip_address == ip_address,
                    LoginAttempt.timestamp >= since,
                    LoginAttempt.successful.is_(False),
                )
                .count()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting login attempts for {email}: {str(e)}")
            raise RepositoryException(f"Failed to count login attempts: {str(e)}")
