"""
Argo date handling.

Argo stores timestamps as 14-character ``YYYYMMDDHHMMSS`` strings in UTC.
A string is only a valid date if it round-trips exactly through that
format, so short fields, padding and out-of-range components are all
rejected.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


ARGO_DATE_FORMAT = "%Y%m%d%H%M%S"


def parse_argo_date(text: str) -> Optional[datetime]:
    """
    Parse an Argo date string.

    Args:
        text: The raw (untrimmed) field value.

    Returns:
        An aware UTC datetime, or None if the text is not a valid date.
    """
    try:
        parsed = datetime.strptime(text, ARGO_DATE_FORMAT)
    except (ValueError, TypeError):
        return None

    if parsed.strftime(ARGO_DATE_FORMAT) != text:
        return None

    return parsed.replace(tzinfo=timezone.utc)


def format_argo_date(value: datetime) -> str:
    """Format a datetime as an Argo date string (converted to UTC)."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(ARGO_DATE_FORMAT)
