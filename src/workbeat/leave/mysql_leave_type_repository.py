from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal
from .model import LeaveType
from .repository import LeaveTypeRepository


def _row_to_leave_type(r: dict) -> LeaveType:
    return LeaveType(
        leave_type_id=int(r["leave_type_id"]),
        organization_id=int(r["organization_id"]),
        name=r["name"],
        annual_allocation=to_decimal(r["annual_allocation"]),
        requires_approval=bool(r["requires_approval"]),
        is_active=bool(r["is_active"]),
    )


class MySQLLeaveTypeRepository(LeaveTypeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, organization_id: int, leave_type_id: int) -> Optional[LeaveType]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT leave_type_id, organization_id, name, annual_allocation, requires_approval, is_active
                FROM leave_types
                WHERE leave_type_id=%s AND organization_id=%s
                """,
                (int(leave_type_id), int(organization_id)),
            )
            r = fetchone(cur)
            return _row_to_leave_type(r) if r else None

    def list_active(self, *, organization_id: int) -> Sequence[LeaveType]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT leave_type_id, organization_id, name, annual_allocation, requires_approval, is_active
                FROM leave_types
                WHERE organization_id=%s AND is_active=1
                ORDER BY leave_type_id
                """,
                (int(organization_id),),
            )
            return [_row_to_leave_type(r) for r in fetchall(cur)]
