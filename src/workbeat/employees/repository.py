from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee


class EmployeeDirectory(Protocol):
    def get(self, *, employee_id: int, organization_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def list_active_ids(self, *, organization_id: int) -> Sequence[int]:
        raise NotImplementedError
