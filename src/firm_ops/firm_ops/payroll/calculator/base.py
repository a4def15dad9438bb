from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ...attendance.model import AttendanceEntry
from ..model import WorkDayResult


class WorkDayCalculator(ABC):
    """Calculator interface (Strategy Pattern for turning one day's clock events into hours)."""

    @abstractmethod
    def compute_day(self, entries: Sequence[AttendanceEntry]) -> WorkDayResult:
        raise NotImplementedError
