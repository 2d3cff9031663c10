"""Timezone conversion utilities"""
from datetime import datetime, timezone
from typing import Optional
import pytz


def to_utc(dt: datetime, tz: Optional[str] = None) -> datetime:
    """
    Convert a datetime to naive UTC.
    
    Args:
        dt: Datetime object (naive or timezone-aware)
        tz: Optional timezone string (e.g., 'Europe/Helsinki')
            If provided and dt is naive, dt is assumed to be in that timezone
    
    Returns:
        Naive datetime object in UTC
    """
    if dt.tzinfo is None:
        if tz:
            tz_obj = pytz.timezone(tz)
            dt = tz_obj.localize(dt)
        else:
            dt = pytz.UTC.localize(dt)
    
    return dt.astimezone(pytz.UTC).replace(tzinfo=None)


def to_local(dt: datetime, tz: str) -> datetime:
    """Convert a naive UTC datetime to an aware datetime in the given timezone"""
    if dt.tzinfo is None:
        dt = pytz.UTC.localize(dt)
    return dt.astimezone(pytz.timezone(tz))


def parse_iso_utc(value: str) -> datetime:
    """Parse an ISO-8601 string (with or without offset, 'Z' allowed) to naive UTC"""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return to_utc(datetime.fromisoformat(value))


def now_utc() -> datetime:
    """Get current UTC time as naive datetime"""
    return datetime.now(timezone.utc).replace(tzinfo=None)
