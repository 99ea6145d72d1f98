# backend/app/services/conflict_checker.py
"""
Conflict Checker Service for the booking platform

Handles booking conflict detection: a candidate lesson is checked against
the instructor's other non-cancelled lessons on the same date, with the
travel buffer between the two locations applied on both sides.
"""

from datetime import date
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..models.booking import Booking
from ..repositories import RepositoryFactory
from ..repositories.conflict_checker_repository import ConflictCheckerRepository
from .base import BaseService
from .buffer_time import find_conflicts

logger = logging.getLogger(__name__)


class ConflictChecker(BaseService):
    """
    Service for checking booking conflicts.

    Centralizes conflict detection so create and reschedule apply the
    same buffer rules.
    """

    def __init__(self, db: Session, repository: Optional[ConflictCheckerRepository] = None):
        """
        Initialize conflict checker service.

        Args:
            db: Database session
            repository: Optional ConflictCheckerRepository instance
        """
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.repository = repository or RepositoryFactory.create_conflict_checker_repository(db)

    @BaseService.measure_operation("get_conflicting_bookings")
    def get_conflicting_bookings(
        self,
        instructor_id: str,
        booking_date: date,
        start_time: str,
        end_time: str,
        location: str,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """
        Find the instructor's bookings that collide with a candidate lesson.

        Args:
            instructor_id: The instructor to check
            booking_date: The date to check
            start_time: Candidate start, "HH:MM"
            end_time: Candidate end, "HH:MM"
            location: Candidate lesson location
            exclude_booking_id: Booking to ignore (the one being rescheduled)

        Returns:
            Conflicting bookings, ordered by start time
        """
        existing = self.repository.get_bookings_for_conflict_check(
            instructor_id, booking_date, exclude_booking_id
        )
        conflicts = find_conflicts(start_time, end_time, location, existing)

        if conflicts:
            self.logger.warning(
                f"Found {len(conflicts)} booking conflicts for {instructor_id} "
                f"on {booking_date} between {start_time}-{end_time} at {location}"
            )

        return conflicts

    @BaseService.measure_operation("check_time_conflicts")
    def check_time_conflicts(
        self,
        instructor_id: str,
        booking_date: date,
        start_time: str,
        end_time: str,
        location: str,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        """Simplified boolean check for quick validation."""
        return bool(
            self.get_conflicting_bookings(
                instructor_id, booking_date, start_time, end_time, location, exclude_booking_id
            )
        )

    @staticmethod
    def describe_conflicts(conflicts: List[Booking]) -> List[Dict[str, Any]]:
        """Shape conflicts for error details (no student data)."""
        return [
            {
                "booking_id": booking.id,
                "start_time": booking.start_time,
                "end_time": booking.end_time,
                "location": booking.location,
            }
            for booking in conflicts
        ]
