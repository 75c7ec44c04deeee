from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class HalfDayStrategy(AttendanceStrategy):
    """Worked duration below the half-day threshold.

    Only ever downgrades; a sign-in never lifts a half-day back up.
    """

    def decide_sign_in(self, *, current: Optional[AttendanceStatus]) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.HALF_DAY)

    def decide_sign_out(self, *, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.HALF_DAY)
