from __future__ import annotations

from datetime import date
from typing import AbstractSet, Optional, Sequence

from ..core.enums import LeaveRequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal
from .model import LeaveRequest, NewLeaveRequest
from .repository import LeaveRequestRepository

_COLUMNS = """
    request_id, employee_id, organization_id, leave_type_id, start_date, end_date,
    days_requested, status, reason, created_at, decided_by, decided_at, rejection_reason
"""


def _row_to_request(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        organization_id=int(r["organization_id"]),
        leave_type_id=int(r["leave_type_id"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        days_requested=to_decimal(r["days_requested"]),
        status=LeaveRequestStatus(r["status"]),
        reason=r.get("reason"),
        created_at=r.get("created_at"),
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
        rejection_reason=r.get("rejection_reason"),
    )


def _in_clause(values: AbstractSet[LeaveRequestStatus]) -> tuple[str, list[object]]:
    ordered = sorted(s.value for s in values)
    return ",".join(["%s"] * len(ordered)), list(ordered)


class MySQLLeaveRequestRepository(LeaveRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, request: NewLeaveRequest) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    employee_id, organization_id, leave_type_id, start_date, end_date,
                    days_requested, reason, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    request.employee_id,
                    request.organization_id,
                    request.leave_type_id,
                    request.start_date,
                    request.end_date,
                    request.days_requested,
                    request.reason,
                    request.status.value,
                ),
            )
            return int(cur.lastrowid)

    def get(self, *, request_id: int, organization_id: Optional[int] = None) -> Optional[LeaveRequest]:
        clauses = ["request_id=%s"]
        params: list[object] = [int(request_id)]
        if organization_id is not None:
            clauses.append("organization_id=%s")
            params.append(int(organization_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leave_requests WHERE {' AND '.join(clauses)}",
                tuple(params),
            )
            r = fetchone(cur)
            return _row_to_request(r) if r else None

    def find_overlapping(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        statuses: AbstractSet[LeaveRequestStatus],
    ) -> Sequence[LeaveRequest]:
        if not statuses:
            return []
        placeholders, status_params = _in_clause(statuses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE employee_id=%s
                  AND status IN ({placeholders})
                  AND start_date<=%s AND end_date>=%s
                ORDER BY start_date
                """,
                tuple([int(employee_id)] + status_params + [end_date, start_date]),
            )
            return [_row_to_request(r) for r in fetchall(cur)]

    def transition(
        self,
        *,
        request_id: int,
        from_statuses: AbstractSet[LeaveRequestStatus],
        to_status: LeaveRequestStatus,
        decided_by: Optional[int] = None,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        if not from_statuses:
            return False
        placeholders, status_params = _in_clause(from_statuses)
        decided = to_status != LeaveRequestStatus.PENDING
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE leave_requests
                SET status=%s,
                    decided_by=%s,
                    decided_at={"NOW()" if decided else "NULL"},
                    rejection_reason=%s
                WHERE request_id=%s AND status IN ({placeholders})
                """,
                tuple(
                    [
                        to_status.value,
                        decided_by if decided else None,
                        rejection_reason if to_status == LeaveRequestStatus.REJECTED else None,
                        int(request_id),
                    ]
                    + status_params
                ),
            )
            return cur.rowcount > 0

    def delete(self, *, request_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM leave_requests WHERE request_id=%s", (int(request_id),))
            return cur.rowcount > 0

    def list_requests(
        self,
        *,
        organization_id: int,
        employee_id: Optional[int] = None,
        status: Optional[LeaveRequestStatus] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        clauses = ["organization_id=%s"]
        params: list[object] = [int(organization_id)]

        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE {where}
                ORDER BY created_at DESC, request_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_row_to_request(r) for r in fetchall(cur)]
