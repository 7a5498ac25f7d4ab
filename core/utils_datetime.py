"""
Date and time helpers for reservation input.
"""
from datetime import date, datetime
from typing import Any, Optional

import pytz

from core.settings import settings


def get_today(tz_name: Optional[str] = None) -> date:
    """
    Get today's date.

    Uses the configured restaurant timezone when one is set, otherwise the
    system's local date.
    """
    tz_name = tz_name or settings.restaurant_timezone
    if tz_name:
        return datetime.now(pytz.timezone(tz_name)).date()
    return date.today()


def parse_iso_date(value: Any) -> Optional[date]:
    """
    Parse an ISO date or datetime string into a date.

    Backends that store timestamps send values like
    "2024-06-01T00:00:00.000Z"; only the date part is kept.

    Returns:
        date object, or None for anything that is not a parseable ISO string
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def format_time_12h(time_str: str) -> str:
    """
    Format an "HH:MM" slot for display, e.g. "19:00" -> "7:00 PM".

    Unparseable input is returned unchanged.
    """
    if not time_str:
        return ""
    try:
        hours, minutes = time_str.split(":")[:2]
        hour = int(hours)
    except ValueError:
        return time_str
    ampm = "PM" if hour >= 12 else "AM"
    hour12 = hour % 12 or 12
    return f"{hour12}:{minutes} {ampm}"
