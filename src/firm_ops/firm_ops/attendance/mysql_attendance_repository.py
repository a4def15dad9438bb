from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import EntryType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceEntry
from .repository import AttendanceRepository


def _row_to_entry(r: dict) -> AttendanceEntry:
    return AttendanceEntry(
        entry_id=int(r["entry_id"]),
        employee_id=int(r["employee_id"]),
        entry_type=EntryType(r["entry_type"]),
        timestamp=r["timestamp"],
        notes=r.get("notes"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add_entry(
        self,
        *,
        employee_id: int,
        entry_type: EntryType,
        timestamp: datetime,
        notes: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_entries(employee_id, entry_type, `timestamp`, notes)
                VALUES(%s,%s,%s,%s)
                """,
                (int(employee_id), entry_type.value, timestamp, notes),
            )
            return int(cur.lastrowid)

    def get_latest_for_employee(self, employee_id: int) -> Optional[AttendanceEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT entry_id, employee_id, entry_type, `timestamp`, notes
                FROM attendance_entries
                WHERE employee_id=%s
                ORDER BY `timestamp` DESC, entry_id DESC
                LIMIT 1
                """,
                (int(employee_id),),
            )
            r = fetchone(cur)
            return _row_to_entry(r) if r else None

    def find_by_employee_and_range(
        self,
        employee_id: int,
        start: datetime,
        end_exclusive: datetime,
    ) -> Sequence[AttendanceEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT entry_id, employee_id, entry_type, `timestamp`, notes
                FROM attendance_entries
                WHERE employee_id=%s AND `timestamp` >= %s AND `timestamp` < %s
                ORDER BY `timestamp` ASC, entry_id ASC
                """,
                (int(employee_id), start, end_exclusive),
            )
            return [_row_to_entry(r) for r in fetchall(cur)]
