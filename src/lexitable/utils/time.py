"""Time utilities for UTC timestamp formatting and parsing."""

from datetime import date, datetime, timezone
from typing import Any, Optional


def utc_now_z() -> str:
    """
    Get current UTC time as ISO 8601 string with Z suffix.
    
    Returns:
        ISO 8601 UTC timestamp ending with 'Z' (e.g., '2025-12-23T00:27:07.804867Z')
    """
    return to_utc_z(datetime.now(timezone.utc))


def to_utc_z(dt: datetime) -> str:
    """
    Convert datetime to ISO 8601 UTC string with Z suffix.
    
    Args:
        dt: Datetime object (must be timezone-aware)
        
    Raises:
        ValueError: If datetime is naive (not timezone-aware)
    """
    if dt.tzinfo is None:
        raise ValueError(
            f"Naive datetime not allowed. Got {dt}. "
            "Use datetime.now(timezone.utc) or dt.replace(tzinfo=timezone.utc)"
        )
    
    dt_utc = dt.astimezone(timezone.utc)
    return dt_utc.isoformat().replace('+00:00', 'Z')


def as_utc(value: date) -> datetime:
    """Promote a date or naive datetime to an aware UTC datetime."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Best-effort conversion of a date-like value to an aware UTC datetime.
    
    Accepts datetime/date objects, ISO 8601 strings (with or without a trailing
    'Z') and numbers interpreted as epoch milliseconds. Returns None when the
    value cannot be interpreted.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, date):
        return as_utc(value)
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return as_utc(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


def to_epoch_ms(value: Any) -> Optional[float]:
    """Epoch milliseconds for a date-like value, or None if unparsable."""
    parsed = parse_datetime(value)
    if parsed is None:
        return None
    return parsed.timestamp() * 1000
