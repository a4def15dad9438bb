from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from typing import Optional, Sequence

from ..attendance.model import AttendanceEntry
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import iter_dates, start_of_day
from ..common.money import ZERO
from .calculator.base import WorkDayCalculator
from .calculator.standard_calculator import StandardWorkDayCalculator
from .model import PayPeriodCalculationResult, WorkDayResult


class WorkPeriodCalculator:
    """Derives worked days and overtime for an employee over an inclusive date range."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        calculator: Optional[WorkDayCalculator] = None,
    ):
        self._attendance = attendance
        self._calculator = calculator or StandardWorkDayCalculator()

    def compute_day(self, entries: Sequence[AttendanceEntry]) -> WorkDayResult:
        return self._calculator.compute_day(entries)

    def compute_period(self, employee_id: int, start: date, end: date) -> PayPeriodCalculationResult:
        entries = self._attendance.find_by_employee_and_range(
            employee_id,
            start_of_day(start),
            start_of_day(end + timedelta(days=1)),
        )

        by_date: dict[date, list[AttendanceEntry]] = defaultdict(list)
        for entry in entries:
            by_date[entry.work_date].append(entry)

        days_worked = 0
        total_overtime = ZERO
        for day in iter_dates(start, end):
            day_entries = by_date.get(day)
            if not day_entries:
                continue
            day_entries.sort(key=lambda e: e.timestamp)
            result = self.compute_day(day_entries)
            if result.worked:
                days_worked += 1
                total_overtime += result.overtime_hours

        return PayPeriodCalculationResult(days_worked=days_worked, total_overtime_hours=total_overtime)
