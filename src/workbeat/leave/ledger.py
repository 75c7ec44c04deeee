from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import AbstractSet, Callable, Iterable, List, Optional, Tuple

from ..common.datetime_utils import ranges_overlap
from ..common.validators import require_date_range, require_non_negative_days, require_positive_days
from ..core.constants import ACTIVE_LEAVE_STATUSES, DEFAULT_LEDGER_MAX_RETRIES
from ..core.enums import BalanceBucket, LeaveRequestStatus
from ..core.exceptions import (
    BalanceNotFound,
    ConcurrencyConflict,
    InsufficientBalance,
    InvariantViolation,
    OverlapConflict,
    ValidationError,
)
from ..employees.repository import EmployeeDirectory
from ..requests.model import LeaveRequest
from ..requests.repository import LeaveRequestRepository
from .model import BalanceKey, LeaveBalance, NewBalance
from .repository import LeaveBalanceRepository, LeaveTypeRepository

logger = logging.getLogger(__name__)

Counters = Tuple[Decimal, Decimal, Decimal]


class LeaveLedger:
    """Allocated / used / pending day counters per (employee, leave type, year).

    Every mutation is read, compute, then a compare-and-set on the row's
    version; a lost race re-reads and retries, so two writers never both
    act on a stale balance.
    """

    def __init__(
        self,
        balances: LeaveBalanceRepository,
        requests: LeaveRequestRepository,
        leave_types: LeaveTypeRepository,
        employees: EmployeeDirectory,
        *,
        max_retries: int = DEFAULT_LEDGER_MAX_RETRIES,
    ):
        self._balances = balances
        self._requests = requests
        self._leave_types = leave_types
        self._employees = employees
        self._max_retries = max(1, int(max_retries))

    # -------- Overlap --------
    def find_overlaps(
        self,
        employee_id: int,
        start_date: date,
        end_date: date,
        active_statuses: Iterable[LeaveRequestStatus] = ACTIVE_LEAVE_STATUSES,
        *,
        exclude_request_id: Optional[int] = None,
    ) -> List[LeaveRequest]:
        require_date_range(start_date, end_date)
        statuses: AbstractSet[LeaveRequestStatus] = frozenset(LeaveRequestStatus(s) for s in active_statuses)
        candidates = self._requests.find_overlapping(
            employee_id=int(employee_id),
            start_date=start_date,
            end_date=end_date,
            statuses=statuses,
        )
        return [
            r
            for r in candidates
            if r.request_id != exclude_request_id
            and r.status in statuses
            and ranges_overlap(r.start_date, r.end_date, start_date, end_date)
        ]

    def check_overlap(
        self,
        employee_id: int,
        start_date: date,
        end_date: date,
        active_statuses: Iterable[LeaveRequestStatus] = ACTIVE_LEAVE_STATUSES,
    ) -> bool:
        return bool(self.find_overlaps(employee_id, start_date, end_date, active_statuses))

    def ensure_no_overlap(self, employee_id: int, start_date: date, end_date: date) -> None:
        conflicts = self.find_overlaps(employee_id, start_date, end_date)
        if conflicts:
            raise OverlapConflict([r.request_id for r in conflicts])

    # -------- Reads --------
    def balance(self, employee_id: int, leave_type_id: int, year: int) -> LeaveBalance:
        key = BalanceKey(int(employee_id), int(leave_type_id), int(year))
        current = self._balances.get(key)
        if current is None:
            raise BalanceNotFound(key.employee_id, key.leave_type_id, key.year)
        return current

    def remaining(self, employee_id: int, leave_type_id: int, year: int) -> Decimal:
        return self.balance(employee_id, leave_type_id, year).remaining_days

    def employee_summary(self, employee_id: int, organization_id: int, year: int) -> dict:
        rows = self._balances.list_for_employee(
            employee_id=int(employee_id),
            organization_id=int(organization_id),
            year=int(year),
        )
        return {
            "balances": [b.to_dict() for b in rows],
            "summary": {
                "total_allocated": float(sum((b.allocated_days for b in rows), Decimal("0"))),
                "total_used": float(sum((b.used_days for b in rows), Decimal("0"))),
                "total_pending": float(sum((b.pending_days for b in rows), Decimal("0"))),
                "total_remaining": float(sum((b.remaining_days for b in rows), Decimal("0"))),
            },
        }

    # -------- Reserve / commit / release --------
    def reserve(self, employee_id: int, leave_type_id: int, year: int, days) -> LeaveBalance:
        amount = require_positive_days(days)

        def step(b: LeaveBalance) -> Counters:
            available = b.remaining_days
            if amount > available:
                raise InsufficientBalance(requested=amount, available=available)
            return b.allocated_days, b.used_days, b.pending_days + amount

        updated = self._mutate(BalanceKey(int(employee_id), int(leave_type_id), int(year)), step)
        logger.info(
            "Reserved %s day(s) for employee %s, leave type %s, year %s (pending=%s remaining=%s)",
            amount, employee_id, leave_type_id, year, updated.pending_days, updated.remaining_days,
        )
        return updated

    def commit(self, employee_id: int, leave_type_id: int, year: int, days) -> LeaveBalance:
        amount = require_positive_days(days)

        def step(b: LeaveBalance) -> Counters:
            pending = b.pending_days - amount
            if pending < 0:
                self._violation(b, f"commit of {amount} day(s) exceeds pending {b.pending_days}")
            return b.allocated_days, b.used_days + amount, pending

        updated = self._mutate(BalanceKey(int(employee_id), int(leave_type_id), int(year)), step)
        logger.info(
            "Committed %s day(s) for employee %s, leave type %s, year %s (used=%s pending=%s)",
            amount, employee_id, leave_type_id, year, updated.used_days, updated.pending_days,
        )
        return updated

    def release(
        self,
        employee_id: int,
        leave_type_id: int,
        year: int,
        days,
        from_: BalanceBucket | str = BalanceBucket.PENDING,
        *,
        max_retries: int | None = None,
    ) -> LeaveBalance:
        amount = require_positive_days(days)
        try:
            bucket = BalanceBucket(from_)
        except ValueError:
            raise ValidationError(f"Cannot release leave from {from_!r}")

        def step(b: LeaveBalance) -> Counters:
            if bucket == BalanceBucket.PENDING:
                pending = b.pending_days - amount
                if pending < 0:
                    self._violation(b, f"release of {amount} pending day(s) exceeds pending {b.pending_days}")
                return b.allocated_days, b.used_days, pending

            used = b.used_days - amount
            if used < 0:
                self._violation(b, f"release of {amount} used day(s) exceeds used {b.used_days}")
            return b.allocated_days, used, b.pending_days

        key = BalanceKey(int(employee_id), int(leave_type_id), int(year))
        updated = self._mutate(key, step, max_retries=max_retries)
        logger.info(
            "Released %s %s day(s) for employee %s, leave type %s, year %s (remaining=%s)",
            amount, bucket.value, employee_id, leave_type_id, year, updated.remaining_days,
        )
        return updated

    def adjust(
        self,
        employee_id: int,
        leave_type_id: int,
        year: int,
        *,
        allocated_days=None,
        used_days=None,
        pending_days=None,
        reason: str | None = None,
    ) -> LeaveBalance:
        """Administrative correction of the counters (e.g. carry-over, manual fix)."""
        allocated = require_non_negative_days(allocated_days, "allocated_days") if allocated_days is not None else None
        used = require_non_negative_days(used_days, "used_days") if used_days is not None else None
        pending = require_non_negative_days(pending_days, "pending_days") if pending_days is not None else None

        def step(b: LeaveBalance) -> Counters:
            return (
                b.allocated_days if allocated is None else allocated,
                b.used_days if used is None else used,
                b.pending_days if pending is None else pending,
            )

        updated = self._mutate(BalanceKey(int(employee_id), int(leave_type_id), int(year)), step)
        logger.info(
            "Adjusted balance %s: allocated=%s used=%s pending=%s reason=%s",
            updated.balance_id, updated.allocated_days, updated.used_days, updated.pending_days, reason or "-",
        )
        return updated

    # -------- Yearly initialization --------
    def initialize_year(self, organization_id: int, year: int) -> int:
        org = int(organization_id)
        employee_ids = self._employees.list_active_ids(organization_id=org)
        leave_types = self._leave_types.list_active(organization_id=org)
        existing = self._balances.existing_keys(organization_id=org, year=int(year))

        rows = [
            NewBalance(
                employee_id=employee_id,
                organization_id=org,
                leave_type_id=lt.leave_type_id,
                year=int(year),
                allocated_days=lt.annual_allocation,
            )
            for employee_id in employee_ids
            for lt in leave_types
            if (employee_id, lt.leave_type_id) not in existing
        ]
        created = self._balances.create_missing(rows) if rows else 0
        logger.info("Initialized %d leave balance(s) for organization %s, year %s", created, org, year)
        return created

    # -------- Internals --------
    def _mutate(
        self,
        key: BalanceKey,
        step: Callable[[LeaveBalance], Counters],
        max_retries: int | None = None,
    ) -> LeaveBalance:
        attempts = max(1, int(max_retries)) if max_retries is not None else self._max_retries
        for attempt in range(1, attempts + 1):
            current = self._balances.get(key)
            if current is None:
                raise BalanceNotFound(key.employee_id, key.leave_type_id, key.year)

            allocated, used, pending = step(current)
            if self._balances.compare_and_set(
                balance_id=current.balance_id,
                expected_version=current.version,
                allocated_days=allocated,
                used_days=used,
                pending_days=pending,
            ):
                return replace(
                    current,
                    allocated_days=allocated,
                    used_days=used,
                    pending_days=pending,
                    version=current.version + 1,
                )

            logger.warning(
                "Balance %s changed concurrently (attempt %d/%d); retrying",
                current.balance_id, attempt, attempts,
            )

        raise ConcurrencyConflict(
            f"Leave balance for employee {key.employee_id}, leave type {key.leave_type_id}, "
            f"year {key.year} is being updated concurrently; try again"
        )

    @staticmethod
    def _violation(balance: LeaveBalance, detail: str) -> None:
        message = (
            f"Ledger invariant violated on balance {balance.balance_id} "
            f"(employee {balance.employee_id}, leave type {balance.leave_type_id}, year {balance.year}): {detail}"
        )
        logger.critical(message)
        raise InvariantViolation(message)
