from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import Mapping, Optional

WEEKDAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


@dataclass(frozen=True)
class WorkSchedule:
    """Canonical work schedule: a default start plus optional per-weekday starts."""

    start: Optional[time] = None
    weekday_starts: Mapping[int, time] = field(default_factory=dict)

    def start_for(self, work_date: date) -> Optional[time]:
        return self.weekday_starts.get(work_date.weekday(), self.start)

    @classmethod
    def daily(cls, start: time) -> "WorkSchedule":
        return cls(start=start)
