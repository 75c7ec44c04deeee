from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeDirectory


class MySQLEmployeeDirectory(EmployeeDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, employee_id: int, organization_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, organization_id, full_name, department, work_schedule, is_active
                FROM employees
                WHERE employee_id=%s AND organization_id=%s
                """,
                (int(employee_id), int(organization_id)),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Employee(
                employee_id=int(r["employee_id"]),
                organization_id=int(r["organization_id"]),
                full_name=r["full_name"],
                department=r.get("department"),
                # JSON column comes back as str; the schedule resolver parses it.
                work_schedule=r.get("work_schedule"),
                is_active=bool(r["is_active"]),
            )

    def list_active_ids(self, *, organization_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT employee_id FROM employees WHERE organization_id=%s AND is_active=1 ORDER BY employee_id",
                (int(organization_id),),
            )
            return [int(r["employee_id"]) for r in fetchall(cur)]
