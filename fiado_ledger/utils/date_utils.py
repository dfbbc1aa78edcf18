"""Date manipulation utilities"""

from datetime import datetime, time, timedelta, timezone
from typing import Any, Optional


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (the storage convention)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def start_of_week(moment: datetime, week_starts_on: int = 0) -> datetime:
    """Midnight of the first day of the week containing `moment`.

    `week_starts_on` counts from Sunday (0) to Saturday (6).
    """
    # datetime.weekday() is Monday=0; shift to Sunday=0
    sunday_based = (moment.weekday() + 1) % 7
    days_back = (sunday_based - week_starts_on) % 7
    return datetime.combine(moment.date() - timedelta(days=days_back), time.min)


def end_of_week(moment: datetime, week_starts_on: int = 0) -> datetime:
    """Last representable instant of the week containing `moment`"""
    return start_of_week(moment, week_starts_on) + timedelta(days=7) - timedelta(microseconds=1)


def to_naive_utc(moment: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are taken as UTC already"""
    if moment.tzinfo is not None:
        return moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a stored timestamp, returning None when it cannot be read.

    Aware datetimes are converted to naive UTC.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text.replace(" ", "T", 1))
        except ValueError:
            return None
    else:
        return None

    return to_naive_utc(parsed)
