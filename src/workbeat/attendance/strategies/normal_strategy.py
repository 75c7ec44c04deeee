from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """On-time sign-in, full-length sign-out."""

    def decide_sign_in(self, *, current: Optional[AttendanceStatus]) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)

    def decide_sign_out(self, *, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
