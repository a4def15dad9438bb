from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import EntryType
from ..model import AttendanceEntry
from .base import ALLOW, ClockDecision, ClockRule, refuse


class BusinessHoursRule(ClockRule):
    """Events allowed only from first_hour:00 to last_hour:59."""

    def __init__(self, *, first_hour: int, last_hour: int):
        self._first_hour = int(first_hour)
        self._last_hour = int(last_hour)

    def decide(self, *, entry_type: EntryType, now: datetime, latest: Optional[AttendanceEntry]) -> ClockDecision:
        if self._first_hour <= now.hour <= self._last_hour:
            return ALLOW
        action = "Clock-in" if entry_type == EntryType.CLOCK_IN else "Clock-out"
        return refuse(
            f"{action} is only allowed between {self._first_hour:02d}:00 and {self._last_hour:02d}:59"
        )


class WeekdayRule(ClockRule):
    def decide(self, *, entry_type: EntryType, now: datetime, latest: Optional[AttendanceEntry]) -> ClockDecision:
        if now.weekday() >= 5:
            return refuse("Clock-in is not allowed on weekends")
        return ALLOW


class MinimumGapRule(ClockRule):
    """Rejects rapid repeated events."""

    def __init__(self, *, minutes: int):
        self._minutes = int(minutes)

    def decide(self, *, entry_type: EntryType, now: datetime, latest: Optional[AttendanceEntry]) -> ClockDecision:
        if latest is None:
            return ALLOW
        elapsed_minutes = int((now - latest.timestamp).total_seconds() // 60)
        if elapsed_minutes < self._minutes:
            return refuse(f"Please wait at least {self._minutes} minute(s) between clock entries")
        return ALLOW
