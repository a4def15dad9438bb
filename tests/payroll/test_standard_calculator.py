from datetime import datetime
from decimal import Decimal

from src.firm_ops.firm_ops.attendance.model import AttendanceEntry
from src.firm_ops.firm_ops.core.enums import EntryType
from src.firm_ops.firm_ops.payroll.calculator.standard_calculator import StandardWorkDayCalculator


def _entry(entry_id: int, entry_type: EntryType, ts: datetime) -> AttendanceEntry:
    return AttendanceEntry(entry_id=entry_id, employee_id=1, entry_type=entry_type, timestamp=ts)


def _day(*events):
    return [_entry(i, t, ts) for i, (t, ts) in enumerate(events, start=1)]


IN, OUT = EntryType.CLOCK_IN, EntryType.CLOCK_OUT


def test_nine_hours_ten_minutes_rounds_to_two_places():
    entries = _day((IN, datetime(2025, 1, 6, 8, 0)), (OUT, datetime(2025, 1, 6, 17, 10)))

    result = StandardWorkDayCalculator().compute_day(entries)

    assert result.worked is True
    assert result.worked_hours == Decimal("9.17")
    assert result.overtime_hours == Decimal("1.17")


def test_nine_to_six_is_one_hour_overtime():
    entries = _day((IN, datetime(2025, 1, 6, 9, 0)), (OUT, datetime(2025, 1, 6, 18, 0)))

    result = StandardWorkDayCalculator().compute_day(entries)

    assert result.worked_hours == Decimal("9.00")
    assert result.overtime_hours == Decimal("1.00")
    assert result.worked is True
    assert result.work_date == datetime(2025, 1, 6).date()


def test_no_events_means_not_worked():
    result = StandardWorkDayCalculator().compute_day([])

    assert result.worked is False
    assert result.worked_hours == Decimal("0")
    assert result.overtime_hours == Decimal("0")


def test_dangling_clock_in_is_ignored():
    result = StandardWorkDayCalculator().compute_day(_day((IN, datetime(2025, 1, 6, 9, 0))))

    assert result.worked is False
    assert result.worked_hours == Decimal("0")


def test_mismatched_neighbours_are_skipped():
    entries = _day(
        (IN, datetime(2025, 1, 6, 8, 0)),
        (IN, datetime(2025, 1, 6, 9, 0)),
        (OUT, datetime(2025, 1, 6, 12, 0)),
        (OUT, datetime(2025, 1, 6, 13, 0)),
    )

    result = StandardWorkDayCalculator().compute_day(entries)

    assert result.worked_hours == Decimal("3.00")
    assert result.overtime_hours == Decimal("0")


def test_short_intervals_do_not_combine_into_overtime():
    entries = _day(
        (IN, datetime(2025, 1, 6, 7, 0)),
        (OUT, datetime(2025, 1, 6, 12, 0)),
        (IN, datetime(2025, 1, 6, 13, 0)),
        (OUT, datetime(2025, 1, 6, 18, 0)),
    )

    result = StandardWorkDayCalculator().compute_day(entries)

    assert result.worked_hours == Decimal("10.00")
    assert result.overtime_hours == Decimal("0")


def test_threshold_is_configurable():
    entries = _day((IN, datetime(2025, 1, 6, 9, 0)), (OUT, datetime(2025, 1, 6, 17, 0)))

    result = StandardWorkDayCalculator(threshold_hours=Decimal("7.5")).compute_day(entries)

    assert result.overtime_hours == Decimal("0.50")
