from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import EntryType


@dataclass(frozen=True)
class AttendanceEntry:
    """Domain entity: one clock event. Never updated or deleted (audit trail)."""

    entry_id: int
    employee_id: int
    entry_type: EntryType
    timestamp: datetime
    notes: Optional[str] = None

    @property
    def work_date(self) -> date:
        return self.timestamp.date()

    def to_dict(self) -> dict:
        return {
            "entry_id": self.entry_id,
            "employee_id": self.employee_id,
            "entry_type": self.entry_type.value,
            "timestamp": self.timestamp.isoformat(timespec="seconds"),
            "notes": self.notes,
        }


@dataclass(frozen=True)
class ClockStatus:
    is_clocked_in: bool
    last_entry: Optional[AttendanceEntry]
    today_entries: list[AttendanceEntry]
