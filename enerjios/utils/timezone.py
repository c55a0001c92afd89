# -*- coding: utf-8 -*-
"""
Timezone Utilities
Replaces deprecated datetime.utcnow() with timezone-aware alternatives
"""
from datetime import datetime, timezone, date
from typing import Optional


def utc_now() -> datetime:
    """
    Get current UTC time as timezone-aware datetime.

    Returns:
        datetime: Current UTC time with timezone info
    """
    return datetime.now(timezone.utc)


def utc_now_naive() -> datetime:
    """
    Get current UTC time as naive datetime (no timezone info).

    All DateTime columns store naive UTC, so comparisons against
    column values should use this helper.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Normalize an aware or naive datetime to naive UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def start_of_day(dt: datetime) -> datetime:
    """Midnight of the given datetime's day."""
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def days_between(start: datetime, end: datetime) -> float:
    """Fractional number of days from start to end."""
    return (end - start).total_seconds() / 86400


def parse_date(value) -> Optional[date]:
    """Parse an ISO date (YYYY-MM-DD) or pass a date through."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value)[:10], '%Y-%m-%d').date()
