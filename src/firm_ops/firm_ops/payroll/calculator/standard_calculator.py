from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from ...attendance.model import AttendanceEntry
from ...common.money import ZERO
from ...core.constants import MONEY_QUANTUM, STANDARD_DAILY_HOURS
from ...core.enums import EntryType
from ..model import WorkDayResult
from .base import WorkDayCalculator


class StandardWorkDayCalculator(WorkDayCalculator):
    """Standard rule: each adjacent CLOCK_IN -> CLOCK_OUT pair is one interval.

    Interval hours are whole minutes / 60 rounded to 2 places. Overtime is the
    excess of each interval over the threshold, summed per interval, so two
    short intervals never add up to overtime. Mismatched neighbours and a
    dangling CLOCK_IN are ignored.
    """

    def __init__(self, *, threshold_hours: Decimal = STANDARD_DAILY_HOURS):
        self._threshold = Decimal(threshold_hours)

    def compute_day(self, entries: Sequence[AttendanceEntry]) -> WorkDayResult:
        worked = False
        worked_hours = ZERO
        overtime_hours = ZERO

        for clock_in, clock_out in zip(entries, entries[1:]):
            if clock_in.entry_type != EntryType.CLOCK_IN or clock_out.entry_type != EntryType.CLOCK_OUT:
                continue
            minutes = int((clock_out.timestamp - clock_in.timestamp).total_seconds() // 60)
            hours = (Decimal(minutes) / Decimal(60)).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)

            worked = True
            worked_hours += hours
            if hours > self._threshold:
                overtime_hours += hours - self._threshold

        return WorkDayResult(
            work_date=entries[0].work_date if entries else None,
            worked_hours=worked_hours,
            overtime_hours=overtime_hours,
            worked=worked,
        )
