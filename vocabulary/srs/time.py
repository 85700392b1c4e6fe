"""UTC time and calendar-date helpers for scheduling.

Timestamps are UTC ISO strings ending with 'Z', with second precision:
YYYY-MM-DDTHH:MM:SSZ. Review dates are plain calendar dates (YYYY-MM-DD).
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC 'now'."""
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Return today's calendar date in UTC."""
    return utc_now().date()


def utc_now_iso() -> str:
    """Return current time as UTC ISO string with second precision and trailing 'Z'."""
    return utc_datetime_to_iso_z(utc_now())


def utc_datetime_to_iso_z(dt: datetime) -> str:
    """Format a datetime as UTC ISO string with second precision and trailing 'Z'."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)

    dt = dt.replace(microsecond=0)
    return dt.isoformat().replace("+00:00", "Z")


def parse_iso_date(s: str) -> date:
    """Parse a calendar date.

    Accepts plain dates (2025-12-13) as well as full timestamps, in which case
    the UTC date of the timestamp is returned.
    """
    if len(s) == 10:
        return date.fromisoformat(s)
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).date()


def date_to_iso(d: date | None) -> str | None:
    return d.isoformat() if d is not None else None


def add_days(d: date, days: int) -> date:
    return d + timedelta(days=days)


def days_between(start: date, end: date) -> int:
    """Whole days from ``start`` to ``end`` (negative if ``end`` is earlier)."""
    return (end - start).days
