from __future__ import annotations

import itertools
import threading
from dataclasses import replace
from decimal import Decimal
from typing import AbstractSet, Dict, Iterable, Optional, Sequence, Tuple

from ..common.locks import KeyedLock
from .model import BalanceKey, LeaveBalance, LeaveType, NewBalance
from .repository import LeaveBalanceRepository, LeaveTypeRepository


class InMemoryLeaveBalanceRepository(LeaveBalanceRepository):
    """Balance rows in a dict; compare-and-set runs under the row's lock."""

    def __init__(self, balances: Iterable[LeaveBalance] = ()):
        self._by_key: Dict[BalanceKey, LeaveBalance] = {}
        self._key_by_id: Dict[int, BalanceKey] = {}
        self._locks = KeyedLock()
        self._insert_lock = threading.Lock()
        self._ids = itertools.count(1)
        for b in balances:
            self.put(b)

    def put(self, balance: LeaveBalance) -> LeaveBalance:
        """Seed helper: store a row under a freshly assigned id."""
        with self._insert_lock:
            balance = replace(balance, balance_id=next(self._ids))
            self._by_key[balance.key] = balance
            self._key_by_id[balance.balance_id] = balance.key
            return balance

    def get(self, key: BalanceKey) -> Optional[LeaveBalance]:
        return self._by_key.get(key)

    def compare_and_set(
        self,
        *,
        balance_id: int,
        expected_version: int,
        allocated_days: Decimal,
        used_days: Decimal,
        pending_days: Decimal,
    ) -> bool:
        key = self._key_by_id.get(balance_id)
        if key is None:
            return False
        with self._locks.hold(balance_id):
            current = self._by_key[key]
            if current.version != expected_version:
                return False
            self._by_key[key] = replace(
                current,
                allocated_days=allocated_days,
                used_days=used_days,
                pending_days=pending_days,
                version=current.version + 1,
            )
            return True

    def list_for_employee(self, *, employee_id: int, organization_id: int, year: int) -> Sequence[LeaveBalance]:
        rows = [
            b
            for b in self._by_key.values()
            if b.employee_id == employee_id and b.organization_id == organization_id and b.year == year
        ]
        rows.sort(key=lambda b: (b.leave_type_name or "", b.leave_type_id))
        return rows

    def existing_keys(self, *, organization_id: int, year: int) -> AbstractSet[Tuple[int, int]]:
        return {
            (b.employee_id, b.leave_type_id)
            for b in self._by_key.values()
            if b.organization_id == organization_id and b.year == year
        }

    def create_missing(self, rows: Sequence[NewBalance]) -> int:
        created = 0
        with self._insert_lock:
            for row in rows:
                key = BalanceKey(row.employee_id, row.leave_type_id, row.year)
                if key in self._by_key:
                    continue
                balance = LeaveBalance(
                    balance_id=next(self._ids),
                    employee_id=row.employee_id,
                    organization_id=row.organization_id,
                    leave_type_id=row.leave_type_id,
                    year=row.year,
                    allocated_days=row.allocated_days,
                )
                self._by_key[key] = balance
                self._key_by_id[balance.balance_id] = key
                created += 1
        return created


class InMemoryLeaveTypeRepository(LeaveTypeRepository):
    def __init__(self, leave_types: Iterable[LeaveType] = ()):
        self._by_id: Dict[int, LeaveType] = {lt.leave_type_id: lt for lt in leave_types}

    def add(self, leave_type: LeaveType) -> None:
        self._by_id[leave_type.leave_type_id] = leave_type

    def get(self, *, organization_id: int, leave_type_id: int) -> Optional[LeaveType]:
        lt = self._by_id.get(int(leave_type_id))
        if lt is None or lt.organization_id != int(organization_id):
            return None
        return lt

    def list_active(self, *, organization_id: int) -> Sequence[LeaveType]:
        return [
            lt
            for lt in sorted(self._by_id.values(), key=lambda lt: lt.leave_type_id)
            if lt.organization_id == int(organization_id) and lt.is_active
        ]
