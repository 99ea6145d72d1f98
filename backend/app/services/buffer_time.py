# backend/app/services/buffer_time.py
"""
Buffer-time rules between lesson locations.

An instructor needs travel/prep time between two lessons. The gap depends on
where the previous lesson ends and where the next one starts:

    same location                              15 min
    Vancouver <-> Surrey                       30 min
    North Vancouver <-> Burnaby or Surrey      45 min
    anything else                              30 min

Times are "HH:MM" strings on a single calendar day and are compared as
minute-of-day integers. Lessons that run past midnight are not supported.
"""

from datetime import time
import logging
import re
from typing import Iterable, List, Mapping, Protocol, TypeVar

from ..core.constants import (
    LOCATION_BURNABY,
    LOCATION_NORTH_VANCOUVER,
    LOCATION_SURREY,
    LOCATION_VANCOUVER,
)
from ..core.exceptions import ValidationException

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

SAME_LOCATION_BUFFER = 15
DEFAULT_BUFFER = 30

_TIME_PATTERN = re.compile(r"^([01][0-9]|2[0-3]):([0-5][0-9])$")

# Keyed by (from_location, to_location); both directions listed explicitly
_PAIR_BUFFERS: Mapping[tuple, int] = {
    (LOCATION_VANCOUVER, LOCATION_SURREY): 30,
    (LOCATION_SURREY, LOCATION_VANCOUVER): 30,
    (LOCATION_NORTH_VANCOUVER, LOCATION_BURNABY): 45,
    (LOCATION_BURNABY, LOCATION_NORTH_VANCOUVER): 45,
    (LOCATION_NORTH_VANCOUVER, LOCATION_SURREY): 45,
    (LOCATION_SURREY, LOCATION_NORTH_VANCOUVER): 45,
}


class TimedLesson(Protocol):
    """Anything with a location and a same-day HH:MM interval (a Booking, usually)."""

    location: str
    start_time: str
    end_time: str


L = TypeVar("L", bound=TimedLesson)


def buffer_minutes(from_location: str, to_location: str) -> int:
    """Minutes required between a lesson at `from_location` and one at `to_location`."""
    if from_location == to_location:
        return SAME_LOCATION_BUFFER
    return _PAIR_BUFFERS.get((from_location, to_location), DEFAULT_BUFFER)


def parse_time(value: str) -> time:
    """
    Parse a strict 24-hour "HH:MM" string.

    Raises:
        ValidationException: if the value is not a valid HH:MM time
    """
    match = _TIME_PATTERN.match(value) if isinstance(value, str) else None
    if not match:
        raise ValidationException(
            f"Invalid time '{value}', expected HH:MM",
            code="INVALID_TIME",
            details={"value": value},
        )
    return time(int(match.group(1)), int(match.group(2)))


def to_minutes(value: str) -> int:
    parsed = parse_time(value)
    return parsed.hour * 60 + parsed.minute


def format_minutes(total: int) -> str:
    total %= MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


def add_minutes(value: str, minutes: int) -> str:
    """Add minutes to an HH:MM time, wrapping at midnight (no date rollover)."""
    return format_minutes(to_minutes(value) + minutes)


def _conflicts_with(new_start: int, new_end: int, new_location: str, existing: TimedLesson) -> bool:
    existing_start = to_minutes(existing.start_time)
    existing_end = to_minutes(existing.end_time)
    # before: existing location -> new location; after: new location -> existing location
    before = buffer_minutes(existing.location, new_location)
    after = buffer_minutes(new_location, existing.location)

    # The new lesson must start at least `before` minutes after the existing one
    # ends, or finish at least `after` minutes before it starts.
    return new_start < existing_end + before and new_end + after > existing_start


def find_conflicts(
    new_start: str,
    new_end: str,
    new_location: str,
    existing: Iterable[L],
) -> List[L]:
    """Return the existing lessons that collide with the new one once buffers apply."""
    start = to_minutes(new_start)
    end = to_minutes(new_end)
    return [lesson for lesson in existing if _conflicts_with(start, end, new_location, lesson)]


def has_conflict(
    new_start: str,
    new_end: str,
    new_location: str,
    existing: Iterable[TimedLesson],
) -> bool:
    start = to_minutes(new_start)
    end = to_minutes(new_end)
    return any(_conflicts_with(start, end, new_location, lesson) for lesson in existing)
