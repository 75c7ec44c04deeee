from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Employee:
    """Read-only projection of the employee registry."""

    employee_id: int
    organization_id: int
    full_name: str
    department: Optional[str] = None
    work_schedule: Any = None
    is_active: bool = True
