from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Derived status of a daily attendance row."""

    PRESENT = "present"
    LATE = "late"
    HALF_DAY = "half-day"
    ABSENT = "absent"
    HOLIDAY = "holiday"
    LEAVE = "leave"


class EventType(str, Enum):
    """Raw attendance event kinds accepted by the tracker."""

    SIGN_IN = "sign-in"
    SIGN_OUT = "sign-out"


class LeaveRequestStatus(str, Enum):
    """Leave request lifecycle states."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class BalanceBucket(str, Enum):
    """Which ledger counter a release gives days back from."""

    PENDING = "pending"
    APPROVED = "approved"
