# backend/app/routes/bookings.py
"""
Booking routes.

Students create and list their own bookings; admins approve, cancel,
reschedule and run the expiry/reminder jobs. All business rules live in
BookingService.
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..api.dependencies.auth import get_current_user, require_admin
from ..api.dependencies.services import get_booking_service
from ..models.user import User, UserRole
from ..schemas.booking import (
    AvailabilityCheckRequest,
    AvailabilityCheckResponse,
    BatchResult,
    BookingCreate,
    BookingListResponse,
    BookingReschedule,
    BookingResponse,
    BookingStatusUpdate,
    BookingStatusValue,
)
from ..services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


@router.get("", response_model=BookingListResponse)
async def list_bookings(
    user_id: Optional[str] = Query(None),
    instructor_id: Optional[str] = Query(None),
    status_filter: Optional[BookingStatusValue] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingListResponse:
    """
    List bookings.

    Admins may filter by any student or instructor. Instructors only see their
    own lessons and students only their own bookings.
    """
    if not current_user.is_admin:
        if current_user.role == UserRole.INSTRUCTOR.value and current_user.instructor_profile:
            user_id, instructor_id = None, current_user.instructor_profile.id
        else:
            user_id, instructor_id = current_user.id, None

    bookings = await asyncio.to_thread(
        booking_service.list_bookings, user_id=user_id, instructor_id=instructor_id, status=status_filter
    )
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=len(bookings),
    )


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """
    Request a lesson.

    Raises:
        400: Outside opening hours (SLOT_UNAVAILABLE) or invalid request
        404: Unknown instructor
        409: Collides with another lesson once travel buffers apply (BOOKING_CONFLICT)
    """
    booking = await asyncio.to_thread(booking_service.create_booking, current_user, booking_data)
    return BookingResponse.model_validate(booking)


@router.post("/check-availability", response_model=AvailabilityCheckResponse)
async def check_availability(
    body: AvailabilityCheckRequest,
    booking_service: BookingService = Depends(get_booking_service),
) -> AvailabilityCheckResponse:
    result = await asyncio.to_thread(
        booking_service.check_availability,
        body.instructor_id,
        body.booking_date,
        body.start_time,
        body.duration_minutes,
        body.location,
        class_type=body.class_type,
    )
    return AvailabilityCheckResponse(**result)


@router.put("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: str,
    body: BookingStatusUpdate,
    _: User = Depends(require_admin),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    booking = await asyncio.to_thread(booking_service.update_status, booking_id, body.status)
    return BookingResponse.model_validate(booking)


@router.put("/{booking_id}/reschedule", response_model=BookingResponse)
async def reschedule_booking(
    booking_id: str,
    body: BookingReschedule,
    _: User = Depends(require_admin),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    booking = await asyncio.to_thread(
        booking_service.reschedule_booking,
        booking_id,
        body.booking_date,
        body.start_time,
        send_email=body.send_email,
    )
    return BookingResponse.model_validate(booking)


@router.post("/expire-pending", response_model=BatchResult)
async def expire_pending_bookings(
    _: User = Depends(require_admin),
    booking_service: BookingService = Depends(get_booking_service),
) -> BatchResult:
    """Cancel pending requests older than the expiry window."""
    return BatchResult(processed=await asyncio.to_thread(booking_service.cancel_expired_pending))


@router.post("/send-reminders", response_model=BatchResult)
async def send_booking_reminders(
    _: User = Depends(require_admin),
    booking_service: BookingService = Depends(get_booking_service),
) -> BatchResult:
    """Email students with an approved lesson tomorrow."""
    return BatchResult(processed=await asyncio.to_thread(booking_service.send_reminders_for_tomorrow))
