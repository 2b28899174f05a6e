"""
Day-granular date helpers.

All schedule arithmetic works on ``datetime.date`` values. A task occupies the
half-open interval ``[start, start + duration)``, so "end" is always exclusive.
"""

import re
from datetime import date, timedelta
from typing import Iterable, Optional

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a strict ``YYYY-MM-DD`` string.

    Returns None for anything else, including well-formed strings that name
    an impossible day (``2025-02-30``).
    """
    if not value:
        return None
    m = _ISO_DATE.match(value.strip())
    if not m:
        return None
    try:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        return None


def format_iso(value: date) -> str:
    return value.isoformat()


def add_days(value: date, days: int) -> date:
    """Shift value by days, saturating at ``date.min`` / ``date.max``."""
    try:
        return value + timedelta(days=days)
    except OverflowError:
        return date.max if days > 0 else date.min


def days_between(start: date, end: date) -> int:
    """Whole days from start to end (negative when end precedes start)."""
    return (end - start).days


def min_date(dates: Iterable[date], default: date) -> date:
    return min(dates, default=default)


def max_date(dates: Iterable[date], default: date) -> date:
    return max(dates, default=default)
