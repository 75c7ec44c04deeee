from __future__ import annotations

from datetime import date
from typing import Callable, Optional, Protocol, Sequence

from .model import AttendanceKey, DailyAttendance

Mutation = Callable[[Optional[DailyAttendance]], DailyAttendance]


class DailyAttendanceRepository(Protocol):
    def get(self, key: AttendanceKey) -> Optional[DailyAttendance]:
        raise NotImplementedError

    def apply(self, key: AttendanceKey, mutate: Mutation) -> DailyAttendance:
        """Atomic find-or-create + update of one row.

        ``mutate`` receives the current row (or None) and returns the new row.
        Implementations serialize concurrent calls for the same key.
        """

        raise NotImplementedError

    def list_for_employee(
        self,
        *,
        employee_id: int,
        organization_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 30,
    ) -> Sequence[DailyAttendance]:
        raise NotImplementedError
