# backend/app/schemas/booking.py
"""
Booking request/response DTOs.

Times travel as 24-hour "HH:MM" strings; dates as ISO dates.
"""

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ._strict_base import HHMM_PATTERN, StrictModel, StrictRequestModel


BookingStatusValue = Literal["pending", "approved", "completed", "cancelled"]


class BookingCreate(StrictRequestModel):
    instructor_id: str
    location: str = Field(..., min_length=1, max_length=100)
    class_type: str = Field(..., min_length=1, max_length=50)
    package: str = Field(..., min_length=1, max_length=100)
    duration_minutes: int = Field(..., gt=0)
    booking_date: date
    start_time: str = Field(..., pattern=HHMM_PATTERN)


class AvailabilityCheckRequest(StrictRequestModel):
    instructor_id: str
    booking_date: date
    start_time: str = Field(..., pattern=HHMM_PATTERN)
    duration_minutes: int = Field(..., gt=0)
    location: str = Field(..., min_length=1)
    class_type: Optional[str] = Field(None, min_length=1, max_length=50)


class AvailabilityCheckResponse(StrictModel):
    available: bool
    reason: Optional[str] = None
    end_time: Optional[str] = None


class BookingStatusUpdate(StrictRequestModel):
    status: BookingStatusValue


class BookingReschedule(StrictRequestModel):
    booking_date: date
    start_time: str = Field(..., pattern=HHMM_PATTERN)
    send_email: bool = True


class BookingResponse(BaseModel):
    id: str
    user_id: str
    instructor_id: str
    location: str
    class_type: str
    package: str
    duration_minutes: int
    booking_date: date
    start_time: str
    end_time: str
    status: str
    payment_status: str
    payment_id: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BookingListResponse(StrictModel):
    bookings: List[BookingResponse]
    total: int


class BatchResult(StrictModel):
    """Result of an admin batch job (expiry sweep, reminders)."""

    processed: int
