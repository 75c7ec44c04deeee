from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceKey:
    """Identity of a daily attendance row."""

    employee_id: int
    organization_id: int
    work_date: date


@dataclass(frozen=True)
class DailyAttendance:
    """Domain entity: one derived attendance row per employee per day."""

    employee_id: int
    organization_id: int
    work_date: date
    status: AttendanceStatus
    sign_in_time: Optional[datetime] = None
    sign_out_time: Optional[datetime] = None
    work_duration_minutes: Optional[int] = None
    notes: Optional[str] = None
    attendance_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "employee_id": self.employee_id,
            "organization_id": self.organization_id,
            "date": self.work_date.isoformat(),
            "status": self.status.value,
            "sign_in_time": self.sign_in_time.isoformat() if self.sign_in_time else None,
            "sign_out_time": self.sign_out_time.isoformat() if self.sign_out_time else None,
            "work_duration_minutes": self.work_duration_minutes,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class AttendanceEventResult:
    """What the ingestion path gets back: the row after the event, plus lateness."""

    record: DailyAttendance
    is_late: bool = False

    def to_dict(self) -> dict:
        data = self.record.to_dict()
        data["is_late"] = self.is_late
        return data
