# backend/app/models/availability.py
"""
Availability models for the booking platform.

Classes:
    GlobalAvailability: Recurring weekly opening hours, optionally bounded
        by a validity window (e.g. summer vs winter hours)
    SpecialAvailability: Date-ranged exceptions (holidays, special hours)
        that take precedence over the weekly template
"""

import logging

from sqlalchemy import Boolean, Column, Date, DateTime, Index, String, UniqueConstraint
from sqlalchemy.sql import func
import ulid

from ..database import Base

logger = logging.getLogger(__name__)


class _AvailabilityColumns:
    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    day = Column(String(10), nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def covers_date(self, target) -> bool:
        if self.start_date is not None and target < self.start_date:
            return False
        if self.end_date is not None and target > self.end_date:
            return False
        return True

    @property
    def has_date_range(self) -> bool:
        return self.start_date is not None and self.end_date is not None


class GlobalAvailability(_AvailabilityColumns, Base):
    """Weekly template entry; several per weekday when validity windows differ."""

    __tablename__ = "global_availability"

    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)

    __table_args__ = (
        UniqueConstraint("day", "start_date", "end_date", name="uq_global_availability_day_range"),
        Index("idx_global_availability_day", "day"),
    )

    def __repr__(self) -> str:
        window = f" [{self.start_date}..{self.end_date}]" if self.has_date_range else ""
        return f"<GlobalAvailability {self.day} {self.start_time}-{self.end_time}{window}>"


class SpecialAvailability(_AvailabilityColumns, Base):
    """Date-ranged override of the weekly template."""

    __tablename__ = "special_availability"

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    __table_args__ = (
        UniqueConstraint("day", "start_date", "end_date", name="uq_special_availability_day_range"),
        Index("idx_special_availability_range", "start_date", "end_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<SpecialAvailability {self.day} {self.start_time}-{self.end_time} "
            f"[{self.start_date}..{self.end_date}]>"
        )
