from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    is_late: bool = False


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status."""

    @abstractmethod
    def decide_sign_in(self, *, current: Optional[AttendanceStatus]) -> StatusDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_sign_out(self, *, current: AttendanceStatus) -> StatusDecision:
        raise NotImplementedError
