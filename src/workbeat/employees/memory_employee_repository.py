from __future__ import annotations

from typing import Dict, Iterable, Optional, Sequence

from .model import Employee
from .repository import EmployeeDirectory


class InMemoryEmployeeDirectory(EmployeeDirectory):
    def __init__(self, employees: Iterable[Employee] = ()):
        self._by_id: Dict[int, Employee] = {e.employee_id: e for e in employees}

    def add(self, employee: Employee) -> None:
        self._by_id[employee.employee_id] = employee

    def get(self, *, employee_id: int, organization_id: int) -> Optional[Employee]:
        e = self._by_id.get(int(employee_id))
        if e is None or e.organization_id != int(organization_id):
            return None
        return e

    def list_active_ids(self, *, organization_id: int) -> Sequence[int]:
        return sorted(
            e.employee_id
            for e in self._by_id.values()
            if e.organization_id == int(organization_id) and e.is_active
        )
