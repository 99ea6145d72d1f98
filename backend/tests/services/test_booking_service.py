"""
BookingService tests.

Cover the full create path (instructor checks, opening hours, buffer-aware
conflicts), rescheduling, status changes with their emails, and the two
batch jobs.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from app.core.constants import BRAND_NAME
from app.core.exceptions import (
    BookingConflictException,
    NotFoundException,
    SlotUnavailableException,
    ValidationException,
)
from app.models.availability import SpecialAvailability
from app.models.booking import Booking, BookingStatus
from app.schemas.booking import BookingCreate
from app.services.booking_service import BookingService
from app.services.email import EmailService
from app.services.email_console import ConsoleEmailService


class BrokenTransport(ConsoleEmailService):
    def send_email(self, to_email, subject, html_content, text_content):
        raise ConnectionError("smtp down")


@pytest.fixture
def service(db, email_service):
    return BookingService(db, email_service=email_service)


@pytest.fixture
def request_for(instructor, lesson_date):
    def _request(start_time="10:00", location="Vancouver", duration=60, **overrides):
        data = {
            "instructor_id": instructor.id,
            "location": location,
            "class_type": "class 7",
            "package": "single lesson",
            "duration_minutes": duration,
            "booking_date": lesson_date,
            "start_time": start_time,
        }
        data.update(overrides)
        return BookingCreate(**data)

    return _request


def _subjects(console):
    return [message["subject"] for message in console.outbox]


@pytest.mark.usefixtures("weekly_hours")
class TestCreateBooking:
    def test_creates_pending_paid_booking(self, service, student, request_for, console_email):
        booking = service.create_booking(student, request_for("10:00"))
        assert booking.status == BookingStatus.PENDING.value
        assert booking.payment_status == "completed"
        assert booking.end_time == "11:00"
        assert booking.user_id == student.id
        assert console_email.outbox[-1]["to"] == student.email
        assert "request was received" in console_email.outbox[-1]["subject"]

    def test_vancouver_then_surrey_respects_travel_buffer(self, service, student, other_student, request_for):
        service.create_booking(student, request_for("10:00", "Vancouver"))

        with pytest.raises(BookingConflictException) as exc_info:
            service.create_booking(other_student, request_for("11:15", "Surrey"))
        conflicts = exc_info.value.details["conflicts"]
        assert [c["location"] for c in conflicts] == ["Vancouver"]
        assert "user_id" not in conflicts[0]

        later = service.create_booking(other_student, request_for("11:30", "Surrey"))
        assert later.start_time == "11:30"

    def test_same_location_needs_fifteen_minutes(self, service, student, request_for):
        service.create_booking(student, request_for("10:00"))
        with pytest.raises(BookingConflictException):
            service.create_booking(student, request_for("11:10"))
        assert service.create_booking(student, request_for("11:15")).start_time == "11:15"

    def test_cancelled_lesson_frees_slot(self, service, student, request_for):
        first = service.create_booking(student, request_for("10:00"))
        service.update_status(first.id, "cancelled")
        assert service.create_booking(student, request_for("10:00")).id != first.id

    def test_unknown_instructor(self, service, student, request_for):
        with pytest.raises(NotFoundException):
            service.create_booking(student, request_for(instructor_id="01HZZZZZZZZZZZZZZZZZZZZZZZ"))

    def test_class_type_not_taught(self, service, student, request_for):
        with pytest.raises(ValidationException):
            service.create_booking(student, request_for(class_type="class 1"))

    def test_location_not_served(self, service, student, request_for):
        with pytest.raises(ValidationException):
            service.create_booking(student, request_for(location="Richmond"))

    @pytest.mark.parametrize("duration", [15, 600])
    def test_duration_bounds(self, service, student, request_for, duration):
        with pytest.raises(ValidationException):
            service.create_booking(student, request_for(duration=duration))

    def test_past_midnight_rejected(self, service, student, request_for):
        with pytest.raises(ValidationException):
            service.create_booking(student, request_for("23:30", duration=60))

    def test_outside_opening_hours(self, service, student, request_for):
        with pytest.raises(SlotUnavailableException) as exc_info:
            service.create_booking(student, request_for("19:30", duration=60))
        assert exc_info.value.code == "SLOT_UNAVAILABLE"
        assert exc_info.value.details["end_time"] == "20:00"

    def test_closed_special_day(self, service, db, student, request_for, lesson_date):
        db.add(
            SpecialAvailability(
                day="Monday",
                start_time="08:00",
                end_time="20:00",
                is_available=False,
                start_date=lesson_date,
                end_date=lesson_date,
            )
        )
        db.commit()
        with pytest.raises(SlotUnavailableException):
            service.create_booking(student, request_for("10:00"))

    def test_email_failure_keeps_booking(self, db, student, request_for):
        service = BookingService(db, email_service=EmailService(console=BrokenTransport()))
        booking = service.create_booking(student, request_for("10:00"))
        assert db.query(Booking).filter(Booking.id == booking.id).count() == 1


@pytest.mark.usefixtures("weekly_hours")
class TestReschedule:
    def test_moves_booking_and_keeps_duration(self, service, student, request_for, lesson_date, console_email):
        booking = service.create_booking(student, request_for("10:00", duration=90))
        moved = service.reschedule_booking(booking.id, lesson_date + timedelta(days=1), "13:00")
        assert (moved.booking_date, moved.start_time, moved.end_time) == (
            lesson_date + timedelta(days=1),
            "13:00",
            "14:30",
        )
        assert "rescheduled" in console_email.outbox[-1]["subject"]

    def test_overlapping_itself_is_allowed(self, service, student, request_for, lesson_date):
        booking = service.create_booking(student, request_for("10:00"))
        moved = service.reschedule_booking(booking.id, lesson_date, "10:30")
        assert moved.end_time == "11:30"

    def test_conflict_with_other_booking(self, service, student, request_for, lesson_date):
        service.create_booking(student, request_for("10:00"))
        other = service.create_booking(student, request_for("14:00"))
        with pytest.raises(BookingConflictException):
            service.reschedule_booking(other.id, lesson_date, "11:00")

    def test_without_email(self, service, student, request_for, lesson_date, console_email):
        booking = service.create_booking(student, request_for("10:00"))
        sent = len(console_email.outbox)
        service.reschedule_booking(booking.id, lesson_date, "15:00", send_email=False)
        assert len(console_email.outbox) == sent

    def test_missing_booking(self, service, lesson_date):
        with pytest.raises(NotFoundException):
            service.reschedule_booking("01HZZZZZZZZZZZZZZZZZZZZZZZ", lesson_date, "10:00")


@pytest.mark.usefixtures("weekly_hours")
class TestUpdateStatus:
    def test_approve_sends_confirmation_once(self, service, student, request_for, console_email):
        booking = service.create_booking(student, request_for("10:00"))
        service.update_status(booking.id, "approved")
        service.update_status(booking.id, "approved")
        assert sum("confirmed" in s for s in _subjects(console_email)) == 1

    def test_cancel_sends_cancellation(self, service, student, request_for, console_email):
        booking = service.create_booking(student, request_for("10:00"))
        updated = service.update_status(booking.id, "cancelled")
        assert updated.status == "cancelled"
        assert "cancelled" in console_email.outbox[-1]["subject"]

    def test_completed_sends_nothing(self, service, student, request_for, console_email):
        booking = service.create_booking(student, request_for("10:00"))
        sent = len(console_email.outbox)
        service.update_status(booking.id, "completed")
        assert len(console_email.outbox) == sent

    def test_invalid_status(self, service, student, request_for):
        booking = service.create_booking(student, request_for("10:00"))
        with pytest.raises(ValidationException):
            service.update_status(booking.id, "archived")


@pytest.mark.usefixtures("weekly_hours")
class TestListBookings:
    def test_ordered_by_start_time(self, service, student, request_for):
        late = service.create_booking(student, request_for("14:00"))
        early = service.create_booking(student, request_for("09:00"))
        assert [b.id for b in service.list_bookings()] == [early.id, late.id]

    def test_filters(self, service, student, other_student, request_for, instructor):
        mine = service.create_booking(student, request_for("09:00"))
        theirs = service.create_booking(other_student, request_for("14:00"))
        service.update_status(theirs.id, "approved")

        assert [b.id for b in service.list_bookings(user_id=student.id)] == [mine.id]
        assert [b.id for b in service.list_bookings(status="approved")] == [theirs.id]
        assert len(service.list_bookings(instructor_id=instructor.id)) == 2


@pytest.mark.usefixtures("weekly_hours")
class TestCheckAvailability:
    def test_free_slot(self, service, instructor, lesson_date):
        result = service.check_availability(instructor.id, lesson_date, "10:00", 60, "Vancouver")
        assert result == {"available": True, "reason": None, "end_time": "11:00"}

    def test_outside_hours(self, service, instructor, lesson_date):
        result = service.check_availability(instructor.id, lesson_date, "07:00", 60, "Vancouver")
        assert result["reason"] == "outside_available_hours"

    def test_conflict(self, service, student, request_for, instructor, lesson_date):
        service.create_booking(student, request_for("10:00", "Vancouver"))
        result = service.check_availability(instructor.id, lesson_date, "11:15", 45, "Surrey")
        assert result == {"available": False, "reason": "conflict", "end_time": "12:00"}

    @pytest.mark.parametrize(
        "start, duration, location, class_type, reason",
        [
            ("10:00", 15, "Vancouver", None, "invalid_duration"),
            ("10:00", 600, "Vancouver", None, "invalid_duration"),
            ("23:30", 60, "Vancouver", None, "past_midnight"),
            ("10:00", 60, "Richmond", None, "location_not_served"),
            ("10:00", 60, "Vancouver", "class 1", "class_type_not_taught"),
        ],
    )
    def test_rejects_what_create_booking_rejects(
        self, service, student, request_for, instructor, lesson_date, start, duration, location, class_type, reason
    ):
        result = service.check_availability(instructor.id, lesson_date, start, duration, location, class_type)
        assert result == {"available": False, "reason": reason, "end_time": None}

        overrides = {"class_type": class_type} if class_type else {}
        with pytest.raises(ValidationException) as exc_info:
            service.create_booking(student, request_for(start, location, duration, **overrides))
        assert exc_info.value.code.lower() == reason

    def test_unknown_instructor(self, service, lesson_date):
        with pytest.raises(NotFoundException):
            service.check_availability("01HZZZZZZZZZZZZZZZZZZZZZZZ", lesson_date, "10:00", 60, "Vancouver")


class TestBatchJobs:
    def _booking(self, db, student, instructor, on, status, created_at=None, start="10:00"):
        booking = Booking(
            user_id=student.id,
            instructor_id=instructor.id,
            location="Burnaby",
            class_type="class 5",
            package="single lesson",
            duration_minutes=60,
            booking_date=on,
            start_time=start,
            end_time="11:00",
            status=status,
            created_at=created_at,
        )
        db.add(booking)
        db.commit()
        return booking

    def test_cancel_expired_pending(self, service, db, student, instructor, lesson_date):
        now = datetime(2030, 1, 5, 12, 0, tzinfo=timezone.utc)
        stale = self._booking(db, student, instructor, lesson_date, "pending", now - timedelta(hours=25))
        fresh = self._booking(db, student, instructor, lesson_date, "pending", now - timedelta(hours=1), "13:00")
        approved = self._booking(db, student, instructor, lesson_date, "approved", now - timedelta(days=3), "15:00")

        assert service.cancel_expired_pending(now=now) == 1
        db.expire_all()
        assert db.get(Booking, stale.id).status == "cancelled"
        assert db.get(Booking, fresh.id).status == "pending"
        assert db.get(Booking, approved.id).status == "approved"

    def test_reminders_only_for_approved_tomorrow(self, service, db, student, instructor, console_email):
        today = date(2030, 1, 6)
        self._booking(db, student, instructor, date(2030, 1, 7), "approved")
        self._booking(db, student, instructor, date(2030, 1, 7), "pending", start="13:00")
        self._booking(db, student, instructor, date(2030, 1, 8), "approved")

        assert service.send_reminders_for_tomorrow(today=today) == 1
        assert _subjects(console_email) == [f"Reminder: your {BRAND_NAME} lesson is tomorrow"]
