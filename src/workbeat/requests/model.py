from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import LeaveRequestStatus


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    employee_id: int
    organization_id: int
    leave_type_id: int
    start_date: date
    end_date: date
    days_requested: Decimal
    status: LeaveRequestStatus
    reason: Optional[str] = None
    created_at: Optional[datetime] = None
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    @property
    def year(self) -> int:
        return self.start_date.year

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "employee_id": self.employee_id,
            "organization_id": self.organization_id,
            "leave_type_id": self.leave_type_id,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "days_requested": float(self.days_requested),
            "status": self.status.value,
            "reason": self.reason,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "decided_by": self.decided_by,
            "decided_at": self.decided_at.isoformat() if self.decided_at else None,
            "rejection_reason": self.rejection_reason,
        }


@dataclass(frozen=True)
class NewLeaveRequest:
    employee_id: int
    organization_id: int
    leave_type_id: int
    start_date: date
    end_date: date
    days_requested: Decimal
    status: LeaveRequestStatus
    reason: Optional[str] = None
