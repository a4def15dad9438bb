from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterator

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date (expected YYYY-MM-DD): {value!r}")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every calendar date in [start, end]."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def count_weekdays(start: date, end: date) -> int:
    """Number of Monday-Friday dates in [start, end]; no holiday calendar."""
    return sum(1 for d in iter_dates(start, end) if d.weekday() < 5)
