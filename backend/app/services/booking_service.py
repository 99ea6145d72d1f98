# backend/app/services/booking_service.py
"""
Booking Service for the booking platform

Handles all booking-related business logic including:
- Creating lesson bookings (availability window + buffer-aware conflict check)
- Rescheduling and status changes with student notifications
- Expiring stale pending requests
- Sending next-day reminders

Known gap: the conflict check and the insert are separate statements with no
lock between them, so two concurrent requests for the same slot can both
succeed. See DESIGN.md.
"""

from datetime import date, datetime, timedelta
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import (
    BookingConflictException,
    NotFoundException,
    ServiceException,
    SlotUnavailableException,
    ValidationException,
)
from ..core.timezone_utils import get_school_today, utc_now
from ..models.booking import Booking, BookingStatus, PaymentStatus
from ..models.instructor import Instructor
from ..models.user import User
from ..repositories import RepositoryFactory
from ..schemas.booking import BookingCreate
from .availability_service import AvailabilityService
from .base import BaseService
from .buffer_time import add_minutes, to_minutes
from .conflict_checker import ConflictChecker
from .email import EmailService

logger = logging.getLogger(__name__)


class BookingService(BaseService):
    """Service layer for booking operations."""

    def __init__(
        self,
        db: Session,
        email_service: Optional[EmailService] = None,
        availability_service: Optional[AvailabilityService] = None,
        conflict_checker: Optional[ConflictChecker] = None,
    ):
        super().__init__(db)
        self.repository = RepositoryFactory.create_booking_repository(db)
        self.instructor_repository = RepositoryFactory.create_instructor_repository(db)
        self.email_service = email_service or EmailService()
        self.availability_service = availability_service or AvailabilityService(db)
        self.conflict_checker = conflict_checker or ConflictChecker(db)

    # Validation helpers

    def _get_instructor(self, instructor_id: str) -> Instructor:
        instructor = self.instructor_repository.get_with_user(instructor_id)
        if not instructor:
            raise NotFoundException(f"Instructor {instructor_id} not found")
        return instructor

    @staticmethod
    def _ensure_instructor_offers(instructor: Instructor, class_type: Optional[str], location: str) -> None:
        if class_type is not None and not instructor.teaches_class(class_type):
            raise ValidationException(
                f"Instructor does not teach {class_type}",
                code="CLASS_TYPE_NOT_TAUGHT",
                details={"class_types": instructor.class_types},
            )
        if not instructor.teaches_at(location):
            raise ValidationException(
                f"Instructor does not teach at {location}",
                code="LOCATION_NOT_SERVED",
                details={"locations": instructor.locations},
            )

    def _calculate_end_time(self, start_time: str, duration_minutes: int) -> str:
        if not settings.min_lesson_minutes <= duration_minutes <= settings.max_lesson_minutes:
            raise ValidationException(
                f"Lesson duration must be between {settings.min_lesson_minutes} "
                f"and {settings.max_lesson_minutes} minutes",
                code="INVALID_DURATION",
                details={"duration_minutes": duration_minutes},
            )
        if to_minutes(start_time) + duration_minutes > 24 * 60:
            raise ValidationException("Lessons cannot run past midnight", code="PAST_MIDNIGHT")
        return add_minutes(start_time, duration_minutes)

    def _ensure_inside_availability(self, booking_date: date, start_time: str, duration_minutes: int) -> None:
        window = self.availability_service.resolve_for_date(booking_date)
        if not window.covers(start_time, duration_minutes):
            raise SlotUnavailableException(
                "Selected time is outside the school's available hours",
                details=window.to_dict(),
            )

    def _ensure_no_conflicts(
        self,
        instructor_id: str,
        booking_date: date,
        start_time: str,
        end_time: str,
        location: str,
        exclude_booking_id: Optional[str] = None,
    ) -> None:
        conflicts = self.conflict_checker.get_conflicting_bookings(
            instructor_id, booking_date, start_time, end_time, location, exclude_booking_id
        )
        if conflicts:
            raise BookingConflictException(
                details={"conflicts": ConflictChecker.describe_conflicts(conflicts)}
            )

    def _notify(self, send, booking: Booking, *args: Any) -> None:
        """Notifications are best-effort; a mail failure never undoes a booking change."""
        try:
            send(booking, *args)
        except ServiceException as e:
            self.logger.warning(f"Notification for booking {booking.id} not sent: {e.message}")

    # Commands

    @BaseService.measure_operation("create_booking")
    def create_booking(self, student: User, booking_data: BookingCreate) -> Booking:
        """
        Create a pending lesson booking for a student.

        Raises:
            NotFoundException: unknown instructor
            ValidationException: instructor doesn't teach the class/location, bad duration
            SlotUnavailableException: slot outside the effective opening hours
            BookingConflictException: slot collides with another lesson (buffers included)
        """
        instructor = self._get_instructor(booking_data.instructor_id)
        self._ensure_instructor_offers(instructor, booking_data.class_type, booking_data.location)

        end_time = self._calculate_end_time(booking_data.start_time, booking_data.duration_minutes)
        self._ensure_inside_availability(
            booking_data.booking_date, booking_data.start_time, booking_data.duration_minutes
        )
        self._ensure_no_conflicts(
            instructor.id,
            booking_data.booking_date,
            booking_data.start_time,
            end_time,
            booking_data.location,
        )

        with self.transaction():
            booking = self.repository.create(
                user_id=student.id,
                instructor_id=instructor.id,
                location=booking_data.location,
                class_type=booking_data.class_type,
                package=booking_data.package,
                duration_minutes=booking_data.duration_minutes,
                booking_date=booking_data.booking_date,
                start_time=booking_data.start_time,
                end_time=end_time,
                status=BookingStatus.PENDING.value,
                # No payment gateway: bookings are recorded as paid
                payment_status=PaymentStatus.COMPLETED.value,
            )

        booking = self.repository.get_booking_with_details(booking.id)
        self.log_operation(
            "create_booking",
            booking_id=booking.id,
            instructor_id=instructor.id,
            booking_date=str(booking.booking_date),
        )
        self._notify(self.email_service.send_booking_pending, booking)
        return booking

    @BaseService.measure_operation("reschedule_booking")
    def reschedule_booking(
        self,
        booking_id: str,
        new_date: date,
        new_start_time: str,
        send_email: bool = True,
    ) -> Booking:
        """Move a booking, keeping its duration, location and instructor."""
        booking = self.repository.get_booking_with_details(booking_id)
        if not booking:
            raise NotFoundException(f"Booking {booking_id} not found")

        old_date, old_start_time = booking.booking_date, booking.start_time
        new_end_time = self._calculate_end_time(new_start_time, booking.duration_minutes)
        self._ensure_inside_availability(new_date, new_start_time, booking.duration_minutes)
        self._ensure_no_conflicts(
            booking.instructor_id,
            new_date,
            new_start_time,
            new_end_time,
            booking.location,
            exclude_booking_id=booking.id,
        )

        with self.transaction():
            booking.booking_date = new_date
            booking.start_time = new_start_time
            booking.end_time = new_end_time

        self.log_operation(
            "reschedule_booking",
            booking_id=booking.id,
            from_slot=f"{old_date} {old_start_time}",
            to_slot=f"{new_date} {new_start_time}",
        )
        if send_email:
            self._notify(self.email_service.send_booking_reschedule, booking, old_date, old_start_time)
        return booking

    @BaseService.measure_operation("update_status")
    def update_status(self, booking_id: str, status: str) -> Booking:
        """Change a booking's status; approving or cancelling emails the student."""
        try:
            new_status = BookingStatus(status)
        except ValueError:
            raise ValidationException(f"Invalid booking status '{status}'")

        booking = self.repository.get_booking_with_details(booking_id)
        if not booking:
            raise NotFoundException(f"Booking {booking_id} not found")

        previous = booking.status
        with self.transaction():
            booking.status = new_status.value

        self.log_operation("update_status", booking_id=booking.id, previous=previous, status=new_status.value)
        if previous != new_status.value:
            if new_status == BookingStatus.APPROVED:
                self._notify(self.email_service.send_booking_confirmation, booking)
            elif new_status == BookingStatus.CANCELLED:
                self._notify(self.email_service.send_booking_cancellation, booking)
        return booking

    # Queries

    @BaseService.measure_operation("list_bookings")
    def list_bookings(
        self,
        user_id: Optional[str] = None,
        instructor_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[Booking]:
        return self.repository.list_bookings(user_id=user_id, instructor_id=instructor_id, status=status)

    @BaseService.measure_operation("check_availability")
    def check_availability(
        self,
        instructor_id: str,
        booking_date: date,
        start_time: str,
        duration_minutes: int,
        location: str,
        class_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Dry-run of create_booking's slot checks for the booking form.

        Returns a dict with available, reason and end_time instead of raising.
        Every rule create_booking enforces is checked; a rejected request
        reports the lowercased error code as its reason. Unknown instructors
        still raise NotFoundException.
        """
        instructor = self._get_instructor(instructor_id)
        try:
            self._ensure_instructor_offers(instructor, class_type, location)
            end_time = self._calculate_end_time(start_time, duration_minutes)
        except ValidationException as e:
            return {"available": False, "reason": e.code.lower(), "end_time": None}

        if not self.availability_service.is_slot_available(booking_date, start_time, duration_minutes):
            return {"available": False, "reason": "outside_available_hours", "end_time": end_time}

        if self.conflict_checker.check_time_conflicts(
            instructor_id, booking_date, start_time, end_time, location
        ):
            return {"available": False, "reason": "conflict", "end_time": end_time}

        return {"available": True, "reason": None, "end_time": end_time}

    # Batch jobs

    @BaseService.measure_operation("cancel_expired_pending")
    def cancel_expired_pending(self, now: Optional[datetime] = None) -> int:
        """Cancel pending requests older than the configured expiry window."""
        cutoff = (now or utc_now()) - timedelta(hours=settings.pending_booking_expiry_hours)
        with self.transaction():
            expired = self.repository.get_pending_created_before(cutoff)
            for booking in expired:
                booking.status = BookingStatus.CANCELLED.value

        if expired:
            self.log_operation("cancel_expired_pending", count=len(expired), cutoff=cutoff.isoformat())
        return len(expired)

    @BaseService.measure_operation("send_reminders_for_tomorrow")
    def send_reminders_for_tomorrow(self, today: Optional[date] = None) -> int:
        """Email every approved booking dated tomorrow (school timezone). Returns emails sent."""
        tomorrow = (today or get_school_today()) + timedelta(days=1)
        bookings = self.repository.get_by_date_and_status(tomorrow, BookingStatus.APPROVED.value)

        sent = 0
        for booking in bookings:
            try:
                self.email_service.send_booking_reminder(booking)
                sent += 1
            except ServiceException as e:
                self.logger.warning(f"Reminder for booking {booking.id} failed: {e.message}")

        self.log_operation("send_reminders_for_tomorrow", date=str(tomorrow), sent=sent, total=len(bookings))
        return sent
