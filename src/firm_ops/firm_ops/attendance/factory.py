from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import (
    CLOCK_IN_LAST_HOUR,
    CLOCK_OUT_LAST_HOUR,
    CLOCK_WINDOW_START_HOUR,
    MIN_MINUTES_BETWEEN_ENTRIES,
)
from ..core.enums import EntryType
from .rules.base import ClockRule
from .rules.sequence_rule import SequenceRule
from .rules.window_rules import BusinessHoursRule, MinimumGapRule, WeekdayRule


@dataclass
class ClockRuleFactory:
    """Factory Pattern: build the ordered rule chain for a clock event."""

    first_hour: int = CLOCK_WINDOW_START_HOUR
    clock_in_last_hour: int = CLOCK_IN_LAST_HOUR
    clock_out_last_hour: int = CLOCK_OUT_LAST_HOUR
    allow_weekends: bool = False
    min_gap_minutes: int = MIN_MINUTES_BETWEEN_ENTRIES

    def for_entry(self, entry_type: EntryType) -> list[ClockRule]:
        rules: list[ClockRule] = [SequenceRule()]
        if entry_type == EntryType.CLOCK_IN:
            rules.append(BusinessHoursRule(first_hour=self.first_hour, last_hour=self.clock_in_last_hour))
            if not self.allow_weekends:
                rules.append(WeekdayRule())
        else:
            rules.append(BusinessHoursRule(first_hour=self.first_hour, last_hour=self.clock_out_last_hour))
        rules.append(MinimumGapRule(minutes=self.min_gap_minutes))
        return rules
