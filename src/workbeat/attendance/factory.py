from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..core.constants import DEFAULT_HALF_DAY_THRESHOLD_MINUTES, DEFAULT_LATE_GRACE_MINUTES
from ..schedules.model import WorkSchedule
from .strategies.base import AttendanceStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES
    half_day_threshold_minutes: int = DEFAULT_HALF_DAY_THRESHOLD_MINUTES

    def scheduled_start(self, *, timestamp: datetime, schedule: Optional[WorkSchedule]) -> Optional[datetime]:
        if schedule is None:
            return None
        start = schedule.start_for(timestamp.date())
        if start is None:
            return None
        return datetime.combine(timestamp.date(), start, tzinfo=timestamp.tzinfo)

    def for_sign_in(self, *, timestamp: datetime, schedule: Optional[WorkSchedule]) -> AttendanceStrategy:
        scheduled = self.scheduled_start(timestamp=timestamp, schedule=schedule)
        if scheduled is None:
            return NormalStrategy()

        if timestamp <= scheduled + timedelta(minutes=self.grace_minutes):
            return NormalStrategy()
        return LateStrategy()

    def for_sign_out(self, *, work_duration_minutes: Optional[int]) -> AttendanceStrategy:
        if work_duration_minutes is not None and work_duration_minutes < self.half_day_threshold_minutes:
            return HalfDayStrategy()
        return NormalStrategy()
