from datetime import datetime, timedelta, timezone

import pytz

from app.core.timezone_utils import ensure_aware, get_school_today, start_of_day, start_of_next_day

TZ = "America/Vancouver"


def local(*args) -> datetime:
    """A Vancouver wall-clock time as an aware UTC instant, per the installed tz data."""
    return pytz.timezone(TZ).localize(datetime(*args)).astimezone(timezone.utc)


def test_school_today_differs_from_utc_date():
    now = local(2030, 1, 7, 20, 0)
    assert now.date().isoformat() == "2030-01-08"
    assert get_school_today(now, TZ).isoformat() == "2030-01-07"


def test_day_boundaries_in_winter():
    now = local(2030, 1, 7, 9, 0)
    assert start_of_day(now, TZ) == local(2030, 1, 7)
    assert start_of_next_day(now, TZ) == local(2030, 1, 8)


def test_day_boundaries_in_summer():
    now = local(2030, 7, 1, 12, 0)
    assert start_of_day(now, TZ) == local(2030, 7, 1)
    assert start_of_next_day(now, TZ) == local(2030, 7, 2)


def test_boundaries_are_utc():
    boundary = start_of_day(local(2030, 1, 7, 9, 0), TZ)
    assert boundary.utcoffset() == timedelta(0)


def test_next_day_across_dst_start():
    # 2025-03-09 was a spring-forward day, so it lasted 23 hours
    now = local(2025, 3, 9, 12, 0)
    assert start_of_day(now, TZ) == local(2025, 3, 9)
    assert start_of_next_day(now, TZ) == local(2025, 3, 10)
    assert start_of_next_day(now, TZ) - start_of_day(now, TZ) == timedelta(hours=23)


def test_ensure_aware():
    naive = datetime(2030, 1, 7, 12, 0)
    assert ensure_aware(naive).tzinfo is timezone.utc
    aware = datetime(2030, 1, 7, 12, 0, tzinfo=timezone.utc)
    assert ensure_aware(aware) is aware
