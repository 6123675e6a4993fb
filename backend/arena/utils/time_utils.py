"""
Time Utilities

UTC normalisation and calendar-week windows.

Functions:
- ensure_utc(dt): Attach/convert to UTC (naive values are taken as UTC)
- week_bounds(dt): Monday 00:00:00.000 .. Sunday 23:59:59.999 containing dt
- previous_week_bounds(dt): The full week before the one containing dt
"""

from datetime import datetime, time, timedelta, timezone


def ensure_utc(value: datetime) -> datetime:
    # Some drivers (SQLite) hand back naive datetimes; everything stored is UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def week_bounds(value: datetime) -> tuple[datetime, datetime]:
    value = ensure_utc(value)
    monday = value.date() - timedelta(days=value.weekday())
    start = datetime.combine(monday, time.min, tzinfo=timezone.utc)
    end = start + timedelta(days=7) - timedelta(milliseconds=1)
    return start, end


def previous_week_bounds(value: datetime) -> tuple[datetime, datetime]:
    start, _ = week_bounds(ensure_utc(value) - timedelta(days=7))
    return start, start + timedelta(days=7) - timedelta(milliseconds=1)
