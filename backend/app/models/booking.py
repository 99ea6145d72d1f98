# backend/app/models/booking.py
"""
Booking model for the booking platform.

A booking is a scheduled driving lesson between a student and an instructor
at one location. Times are stored as "HH:MM" strings on the booking date;
end_time is always start_time + duration_minutes (wrapping at 24h).
"""

from enum import Enum
import logging

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "pending"  # Waiting for admin approval
    APPROVED = "approved"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class Booking(Base):
    """Self-contained lesson booking record."""

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))

    user_id = Column(String(26), ForeignKey("users.id"), nullable=False)
    instructor_id = Column(String(26), ForeignKey("instructors.id"), nullable=False)

    location = Column(String(100), nullable=False)
    class_type = Column(String(50), nullable=False)
    package = Column(String(100), nullable=False)
    duration_minutes = Column(Integer, nullable=False)

    booking_date = Column(Date, nullable=False, index=True)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    payment_id = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", foreign_keys=[user_id])
    instructor = relationship("Instructor", back_populates="bookings")

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'completed', 'cancelled')",
            name="ck_bookings_status",
        ),
        CheckConstraint(
            "payment_status IN ('pending', 'completed', 'failed')",
            name="ck_bookings_payment_status",
        ),
        CheckConstraint("duration_minutes > 0", name="ck_bookings_duration_positive"),
        Index("idx_bookings_instructor_date", "instructor_id", "booking_date"),
    )

    @property
    def is_active(self) -> bool:
        return self.status != BookingStatus.CANCELLED.value

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id} {self.booking_date} {self.start_time}-{self.end_time} "
            f"@ {self.location} ({self.status})>"
        )
