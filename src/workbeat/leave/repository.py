from __future__ import annotations

from decimal import Decimal
from typing import AbstractSet, Optional, Protocol, Sequence, Tuple

from .model import BalanceKey, LeaveBalance, LeaveType, NewBalance


class LeaveBalanceRepository(Protocol):
    def get(self, key: BalanceKey) -> Optional[LeaveBalance]:
        raise NotImplementedError

    def compare_and_set(
        self,
        *,
        balance_id: int,
        expected_version: int,
        allocated_days: Decimal,
        used_days: Decimal,
        pending_days: Decimal,
    ) -> bool:
        """Write all three counters and bump the version, only if the row is still at ``expected_version``."""

        raise NotImplementedError

    def list_for_employee(self, *, employee_id: int, organization_id: int, year: int) -> Sequence[LeaveBalance]:
        raise NotImplementedError

    def existing_keys(self, *, organization_id: int, year: int) -> AbstractSet[Tuple[int, int]]:
        """(employee_id, leave_type_id) pairs that already have a row for ``year``."""

        raise NotImplementedError

    def create_missing(self, rows: Sequence[NewBalance]) -> int:
        """Insert rows that do not exist yet; never overwrites. Returns the number created."""

        raise NotImplementedError


class LeaveTypeRepository(Protocol):
    def get(self, *, organization_id: int, leave_type_id: int) -> Optional[LeaveType]:
        raise NotImplementedError

    def list_active(self, *, organization_id: int) -> Sequence[LeaveType]:
        raise NotImplementedError
