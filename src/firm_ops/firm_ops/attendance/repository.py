from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import EntryType
from .model import AttendanceEntry


class AttendanceRepository(Protocol):
    """Append-only ledger of clock events."""

    def add_entry(
        self,
        *,
        employee_id: int,
        entry_type: EntryType,
        timestamp: datetime,
        notes: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def get_latest_for_employee(self, employee_id: int) -> Optional[AttendanceEntry]:
        raise NotImplementedError

    def find_by_employee_and_range(
        self,
        employee_id: int,
        start: datetime,
        end_exclusive: datetime,
    ) -> Sequence[AttendanceEntry]:
        """Entries with start <= timestamp < end_exclusive, oldest first."""

        raise NotImplementedError
