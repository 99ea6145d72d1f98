# backend/app/services/availability_service.py
"""
Availability Service for the booking platform

Resolves the school's effective opening hours for a calendar date and
manages the two tables that feed it:

- global_availability: the weekly template, one or more rows per weekday.
  A row may carry a validity window (start_date..end_date) for seasonal hours.
- special_availability: date-ranged overrides (holidays, extended hours).

Resolution order for a date:
    1. special rows for the weekday whose range contains the date
    2. global rows for the weekday valid on the date, dated rows first
    3. nothing matched -> closed
Within a tier the narrowest date range wins; ties go to the row updated last.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.constants import DAYS_OF_WEEK
from ..core.exceptions import NotFoundException, ValidationException
from ..core.timezone_utils import ensure_aware
from ..models.availability import GlobalAvailability, SpecialAvailability
from ..repositories import RepositoryFactory
from ..repositories.availability_repository import AvailabilityRepository, AvailabilityRow
from .base import BaseService
from .buffer_time import to_minutes

logger = logging.getLogger(__name__)

SOURCE_SPECIAL = "special"
SOURCE_GLOBAL = "global"
SOURCE_NONE = "none"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class DayAvailability:
    """Effective opening hours for one date."""

    date: date
    day: str
    is_available: bool
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    source: str = SOURCE_NONE

    def covers(self, start_time: str, duration_minutes: int) -> bool:
        """True if [start, start + duration) lies inside the open window."""
        if not self.is_available or self.start_time is None or self.end_time is None:
            return False
        start = to_minutes(start_time)
        return to_minutes(self.start_time) <= start and start + duration_minutes <= to_minutes(self.end_time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "day": self.day,
            "is_available": self.is_available,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "source": self.source,
        }


def weekday_name(target: date) -> str:
    return DAYS_OF_WEEK[target.weekday()]


def _range_span(row: AvailabilityRow) -> int:
    return (row.end_date - row.start_date).days


def _last_touched(row: AvailabilityRow) -> datetime:
    stamp = row.updated_at or row.created_at
    return ensure_aware(stamp) if stamp is not None else _EPOCH


def _pick_most_specific(rows: Sequence[AvailabilityRow]) -> AvailabilityRow:
    narrowest = min(_range_span(row) for row in rows)
    candidates = [row for row in rows if _range_span(row) == narrowest]
    return max(candidates, key=lambda row: (_last_touched(row), row.id))


class AvailabilityService(BaseService):
    """Effective availability resolution plus admin management of the source rows."""

    def __init__(self, db: Session, repository: Optional[AvailabilityRepository] = None):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_availability_repository(db)

    # Resolution

    @BaseService.measure_operation("resolve_for_date")
    def resolve_for_date(self, target_date: date) -> DayAvailability:
        """
        Resolve the opening hours that apply on a date.

        Never raises for a date without configuration; that date is simply closed.
        """
        day = weekday_name(target_date)

        specials = self.repository.get_special_for_date(day, target_date)
        if specials:
            return self._to_day_availability(target_date, _pick_most_specific(specials), SOURCE_SPECIAL)

        globals_ = self.repository.get_global_for_date(day, target_date)
        dated = [row for row in globals_ if row.has_date_range]
        if dated:
            return self._to_day_availability(target_date, _pick_most_specific(dated), SOURCE_GLOBAL)

        undated = [row for row in globals_ if not row.has_date_range]
        if undated:
            chosen = max(undated, key=lambda row: (_last_touched(row), row.id))
            return self._to_day_availability(target_date, chosen, SOURCE_GLOBAL)

        self.logger.debug(f"No availability configured for {day} {target_date}")
        return DayAvailability(date=target_date, day=day, is_available=False)

    @BaseService.measure_operation("is_slot_available")
    def is_slot_available(self, target_date: date, start_time: str, duration_minutes: int) -> bool:
        return self.resolve_for_date(target_date).covers(start_time, duration_minutes)

    @staticmethod
    def _to_day_availability(target_date: date, row: AvailabilityRow, source: str) -> DayAvailability:
        return DayAvailability(
            date=target_date,
            day=row.day,
            is_available=bool(row.is_available),
            start_time=row.start_time,
            end_time=row.end_time,
            source=source,
        )

    # Global availability management

    @BaseService.measure_operation("list_global")
    def list_global(self) -> List[GlobalAvailability]:
        return self.repository.list_global()

    @BaseService.measure_operation("upsert_global")
    def upsert_global(self, data: Dict[str, Any]) -> GlobalAvailability:
        """Create or update a weekly template row keyed by day + date window."""
        payload = self._validate(data, dates_required=False)
        with self.transaction():
            row = self.repository.upsert_global(payload)
        self.log_operation("upsert_global", day=row.day, availability_id=row.id)
        return row

    @BaseService.measure_operation("bulk_upsert_global")
    def bulk_upsert_global(self, items: Iterable[Dict[str, Any]]) -> List[GlobalAvailability]:
        """Upsert several template rows atomically; any invalid row rejects the batch."""
        payloads = [self._validate(item, dates_required=False) for item in items]
        if not payloads:
            raise ValidationException("At least one availability entry is required")

        with self.transaction():
            rows = [self.repository.upsert_global(payload) for payload in payloads]
        self.log_operation("bulk_upsert_global", count=len(rows))
        return rows

    @BaseService.measure_operation("delete_global")
    def delete_global(self, availability_id: str) -> None:
        with self.transaction():
            if not self.repository.delete_global(availability_id):
                raise NotFoundException(f"Global availability {availability_id} not found")
        self.log_operation("delete_global", availability_id=availability_id)

    # Special availability management

    @BaseService.measure_operation("list_special")
    def list_special(self, check_date: Optional[date] = None) -> List[SpecialAvailability]:
        return self.repository.list_special(check_date)

    @BaseService.measure_operation("upsert_special")
    def upsert_special(self, data: Dict[str, Any]) -> SpecialAvailability:
        payload = self._validate(data, dates_required=True)
        with self.transaction():
            row = self.repository.upsert_special(payload)
        self.log_operation(
            "upsert_special",
            day=row.day,
            start_date=str(row.start_date),
            end_date=str(row.end_date),
        )
        return row

    @BaseService.measure_operation("delete_special")
    def delete_special(self, availability_id: str) -> None:
        with self.transaction():
            if not self.repository.delete_special(availability_id):
                raise NotFoundException(f"Special availability {availability_id} not found")
        self.log_operation("delete_special", availability_id=availability_id)

    # Validation

    def _validate(self, data: Dict[str, Any], *, dates_required: bool) -> Dict[str, Any]:
        day = data.get("day")
        if day not in DAYS_OF_WEEK:
            raise ValidationException(f"Invalid day '{day}'", details={"allowed": list(DAYS_OF_WEEK)})

        start_time = data.get("start_time")
        end_time = data.get("end_time")
        if to_minutes(start_time) >= to_minutes(end_time):
            raise ValidationException(
                "start_time must be before end_time",
                details={"start_time": start_time, "end_time": end_time},
            )

        start_date = data.get("start_date")
        end_date = data.get("end_date")
        if dates_required and (start_date is None or end_date is None):
            raise ValidationException("start_date and end_date are required")
        if (start_date is None) != (end_date is None):
            raise ValidationException("Provide both start_date and end_date, or neither")
        if start_date is not None and start_date > end_date:
            raise ValidationException(
                "start_date must not be after end_date",
                details={"start_date": str(start_date), "end_date": str(end_date)},
            )

        return {
            "day": day,
            "start_time": start_time,
            "end_time": end_time,
            "is_available": bool(data.get("is_available", True)),
            "start_date": start_date,
            "end_date": end_date,
        }
