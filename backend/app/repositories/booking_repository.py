# backend/app/repositories/booking_repository.py
"""
Booking Repository for the booking platform

Implements all data access operations for booking management.
"""

from datetime import date, datetime
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.booking import Booking, BookingStatus
from ..models.instructor import Instructor
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking data access."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    def get_booking_with_details(self, booking_id: str) -> Optional[Booking]:
        """Get a booking with student and instructor (and instructor's user) loaded."""
        try:
            return (
                self.db.query(Booking)
                .options(
                    joinedload(Booking.user),
                    joinedload(Booking.instructor).joinedload(Instructor.user),
                )
                .filter(Booking.id == booking_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to get booking: {str(e)}")

    def list_bookings(
        self,
        user_id: Optional[str] = None,
        instructor_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[Booking]:
        """List bookings matching the optional filters, ordered by date and start time."""
        try:
            query = self.db.query(Booking).options(
                joinedload(Booking.user),
                joinedload(Booking.instructor).joinedload(Instructor.user),
            )
            if user_id:
                query = query.filter(Booking.user_id == user_id)
            if instructor_id:
                query = query.filter(Booking.instructor_id == instructor_id)
            if status:
                query = query.filter(Booking.status == status)

            return query.order_by(Booking.booking_date, Booking.start_time).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing bookings: {str(e)}")
            raise RepositoryException(f"Failed to list bookings: {str(e)}")

    def get_pending_created_before(self, cutoff: datetime) -> List[Booking]:
        """Pending bookings created before the cutoff."""
        try:
            return (
                self.db.query(Booking)
                .filter(
                    Booking.status == BookingStatus.PENDING.value,
                    Booking.created_at < cutoff,
                )
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting expired pending bookings: {str(e)}")
            raise RepositoryException(f"Failed to get pending bookings: {str(e)}")

    def get_by_date_and_status(self, target_date: date, status: str) -> List[Booking]:
        try:
            return (
                self.db.query(Booking)
                .options(
                    joinedload(Booking.user),
                    joinedload(Booking.instructor).joinedload(Instructor.user),
                )
                .filter(Booking.booking_date == target_date, Booking.status == status)
                .order_by(Booking.start_time)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting bookings for {target_date}: {str(e)}")
            raise RepositoryException(f"Failed to get bookings: {str(e)}")
