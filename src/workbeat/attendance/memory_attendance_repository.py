from __future__ import annotations

import itertools
from dataclasses import replace
from datetime import date
from typing import Dict, Optional, Sequence

from ..common.locks import KeyedLock
from .model import AttendanceKey, DailyAttendance
from .repository import DailyAttendanceRepository, Mutation


class InMemoryDailyAttendanceRepository(DailyAttendanceRepository):
    """Process-local store; per-key lock stands in for row locking."""

    def __init__(self):
        self._rows: Dict[AttendanceKey, DailyAttendance] = {}
        self._locks = KeyedLock()
        self._ids = itertools.count(1)

    def get(self, key: AttendanceKey) -> Optional[DailyAttendance]:
        return self._rows.get(key)

    def apply(self, key: AttendanceKey, mutate: Mutation) -> DailyAttendance:
        with self._locks.hold(key):
            current = self._rows.get(key)
            updated = mutate(current)
            if current is None:
                updated = replace(updated, attendance_id=next(self._ids))
            else:
                updated = replace(updated, attendance_id=current.attendance_id)
            self._rows[key] = updated
            return updated

    def list_for_employee(
        self,
        *,
        employee_id: int,
        organization_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 30,
    ) -> Sequence[DailyAttendance]:
        items = [
            r
            for r in self._rows.values()
            if r.employee_id == employee_id
            and r.organization_id == organization_id
            and (start_date is None or r.work_date >= start_date)
            and (end_date is None or r.work_date <= end_date)
        ]
        items.sort(key=lambda r: r.work_date, reverse=True)
        return items[:limit]
