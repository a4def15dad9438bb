from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Sequence

from ..common.datetime_utils import now_local, start_of_day
from ..common.validators import optional_text
from ..core.enums import EntryType
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.model import Actor
from ..employees.repository import EmployeeRepository
from .factory import ClockRuleFactory
from .model import AttendanceEntry, ClockStatus
from .repository import AttendanceRepository
from .rules.sequence_rule import is_clocked_in

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        *,
        rule_factory: ClockRuleFactory | None = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._factory = rule_factory or ClockRuleFactory()

    def clock_in(self, actor: Actor, *, notes: str | None = None, now: datetime | None = None) -> AttendanceEntry:
        return self._record(actor, EntryType.CLOCK_IN, notes=notes, now=now)

    def clock_out(self, actor: Actor, *, notes: str | None = None, now: datetime | None = None) -> AttendanceEntry:
        return self._record(actor, EntryType.CLOCK_OUT, notes=notes, now=now)

    def _record(self, actor: Actor, entry_type: EntryType, *, notes: str | None, now: datetime | None) -> AttendanceEntry:
        now = now or now_local()
        employee = self._employees.get_by_id(actor.user_id)
        if not employee or not employee.is_active:
            raise NotFoundError("Employee not found")

        latest = self._attendance.get_latest_for_employee(employee.employee_id)
        for rule in self._factory.for_entry(entry_type):
            decision = rule.decide(entry_type=entry_type, now=now, latest=latest)
            if not decision.allowed:
                raise ValidationError(decision.reason or "Clock entry not allowed")

        note = optional_text(notes)
        entry_id = self._attendance.add_entry(
            employee_id=employee.employee_id,
            entry_type=entry_type,
            timestamp=now,
            notes=note,
        )
        logger.info("Employee %s recorded %s at %s", employee.username, entry_type.value, now.isoformat())
        return AttendanceEntry(
            entry_id=entry_id,
            employee_id=employee.employee_id,
            entry_type=entry_type,
            timestamp=now,
            notes=note,
        )

    def status(self, employee_id: int, *, today: date | None = None) -> ClockStatus:
        today = today or now_local().date()
        latest = self._attendance.get_latest_for_employee(employee_id)
        return ClockStatus(
            is_clocked_in=is_clocked_in(latest, today),
            last_entry=latest,
            today_entries=list(self.entries_for_day(employee_id, today)),
        )

    def entries_for_day(self, employee_id: int, day: date) -> Sequence[AttendanceEntry]:
        return self.history(employee_id, start=day, end=day)

    def history(self, employee_id: int, *, start: date, end: date) -> Sequence[AttendanceEntry]:
        if start > end:
            raise ValidationError("Start date must not be after end date")
        return self._attendance.find_by_employee_and_range(
            employee_id,
            start_of_day(start),
            start_of_day(end + timedelta(days=1)),
        )
