from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class LeaveType:
    """Read-only view of a leave type from the leave type registry."""

    leave_type_id: int
    organization_id: int
    name: str
    annual_allocation: Decimal
    requires_approval: bool = True
    is_active: bool = True


@dataclass(frozen=True)
class BalanceKey:
    employee_id: int
    leave_type_id: int
    year: int


@dataclass(frozen=True)
class LeaveBalance:
    """One ledger row per (employee, leave type, year).

    ``remaining_days`` is derived on every read and never stored.
    """

    balance_id: int
    employee_id: int
    organization_id: int
    leave_type_id: int
    year: int
    allocated_days: Decimal
    used_days: Decimal = Decimal("0")
    pending_days: Decimal = Decimal("0")
    version: int = 0
    leave_type_name: Optional[str] = None

    @property
    def key(self) -> BalanceKey:
        return BalanceKey(self.employee_id, self.leave_type_id, self.year)

    @property
    def remaining_days(self) -> Decimal:
        return self.allocated_days - self.used_days - self.pending_days

    def to_dict(self) -> dict:
        return {
            "balance_id": self.balance_id,
            "employee_id": self.employee_id,
            "organization_id": self.organization_id,
            "leave_type_id": self.leave_type_id,
            "leave_type_name": self.leave_type_name,
            "year": self.year,
            "allocated_days": float(self.allocated_days),
            "used_days": float(self.used_days),
            "pending_days": float(self.pending_days),
            "remaining_days": float(self.remaining_days),
        }


@dataclass(frozen=True)
class NewBalance:
    """Row to create during yearly initialization."""

    employee_id: int
    organization_id: int
    leave_type_id: int
    year: int
    allocated_days: Decimal
