from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import EntryType
from ..model import AttendanceEntry
from .base import ALLOW, ClockDecision, ClockRule, refuse


def is_clocked_in(latest: Optional[AttendanceEntry], today) -> bool:
    return bool(latest and latest.entry_type == EntryType.CLOCK_IN and latest.work_date == today)


class SequenceRule(ClockRule):
    """Clock-in needs the employee to be out; clock-out needs an open clock-in from today."""

    def decide(self, *, entry_type: EntryType, now: datetime, latest: Optional[AttendanceEntry]) -> ClockDecision:
        clocked_in = is_clocked_in(latest, now.date())
        if entry_type == EntryType.CLOCK_IN and clocked_in:
            return refuse("You are already clocked in for today")
        if entry_type == EntryType.CLOCK_OUT and not clocked_in:
            return refuse("You are not currently clocked in")
        return ALLOW
