from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import EntryType
from ..model import AttendanceEntry


@dataclass(frozen=True)
class ClockDecision:
    allowed: bool
    reason: Optional[str] = None


ALLOW = ClockDecision(allowed=True)


def refuse(reason: str) -> ClockDecision:
    return ClockDecision(allowed=False, reason=reason)


class ClockRule(ABC):
    """Strategy Pattern: one guard that a new clock event must pass."""

    @abstractmethod
    def decide(self, *, entry_type: EntryType, now: datetime, latest: Optional[AttendanceEntry]) -> ClockDecision:
        raise NotImplementedError
