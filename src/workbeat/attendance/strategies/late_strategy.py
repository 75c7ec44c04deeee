from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Sign-in after scheduled start + grace."""

    def decide_sign_in(self, *, current: Optional[AttendanceStatus]) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE, is_late=True)

    def decide_sign_out(self, *, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
