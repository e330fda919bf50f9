"""Datetime utilities for common operations."""

from datetime import datetime, date, timezone
from typing import Optional


def now() -> datetime:
    """Get current datetime in UTC."""
    return datetime.now(timezone.utc)


def to_iso(value: Optional[datetime | date]) -> Optional[str]:
    """
    Serialize a datetime/date as ISO-8601.

    Naive datetimes (SQLite drops tzinfo) are treated as UTC.
    """
    if value is None:
        return None
    if isinstance(value, datetime) and value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def parse_date(date_str: str) -> Optional[date]:
    """
    Parse an interview date in one of the accepted formats.

    Args:
        date_str: Date string to parse

    Returns:
        Parsed date or None if invalid
    """
    formats = [
        "%Y-%m-%d",
        "%m/%d/%Y",
        "%Y/%m/%d",
    ]

    for fmt in formats:
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue

    # Full ISO timestamps as sent by date pickers
    try:
        return datetime.fromisoformat(date_str.replace("Z", "+00:00")).date()
    except ValueError:
        return None
