"""
Timezone utilities for the booking platform.

Calendar-day boundaries (login throttling, "tomorrow" for reminders) are
computed in the school's configured timezone rather than the host's.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

import pytz

from .config import settings


def get_school_timezone(tz_name: Optional[str] = None) -> pytz.BaseTzInfo:
    """Return the configured school timezone as a pytz timezone object."""
    return pytz.timezone(tz_name or settings.rate_limit_timezone)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def get_school_today(now: Optional[datetime] = None, tz_name: Optional[str] = None) -> date:
    """Get 'today' in the school's timezone."""
    tz = get_school_timezone(tz_name)
    current = now or utc_now()
    return current.astimezone(tz).date()


def start_of_day(now: Optional[datetime] = None, tz_name: Optional[str] = None) -> datetime:
    """
    Local midnight of the current day, returned as an aware UTC datetime.

    Args:
        now: Reference instant (aware). Defaults to the current time.
        tz_name: Timezone override, mostly for tests.
    """
    tz = get_school_timezone(tz_name)
    local_today = get_school_today(now, tz_name)
    local_midnight = tz.localize(datetime.combine(local_today, datetime.min.time()))
    return local_midnight.astimezone(timezone.utc)


def start_of_next_day(now: Optional[datetime] = None, tz_name: Optional[str] = None) -> datetime:
    """Local midnight of the following day, as an aware UTC datetime."""
    tz = get_school_timezone(tz_name)
    local_tomorrow = get_school_today(now, tz_name) + timedelta(days=1)
    # localize() again rather than adding 24h so DST transitions land on midnight
    local_midnight = tz.localize(datetime.combine(local_tomorrow, datetime.min.time()))
    return local_midnight.astimezone(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
