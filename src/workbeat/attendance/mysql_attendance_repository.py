from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from mysql.connector.errors import DatabaseError

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_retryable_write_conflict
from .model import AttendanceKey, DailyAttendance
from .repository import DailyAttendanceRepository, Mutation

logger = logging.getLogger(__name__)

# A first event for a day takes a gap lock; two of them racing end in a
# duplicate key, a deadlock or a lock wait timeout, all safe to rerun.
APPLY_ATTEMPTS = 3

_COLUMNS = """
    attendance_id, employee_id, organization_id, work_date, status,
    sign_in_time, sign_out_time, work_duration_minutes, notes
"""


def _row_to_record(r: dict) -> DailyAttendance:
    duration = r.get("work_duration_minutes")
    return DailyAttendance(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        organization_id=int(r["organization_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        sign_in_time=r.get("sign_in_time"),
        sign_out_time=r.get("sign_out_time"),
        work_duration_minutes=int(duration) if duration is not None else None,
        notes=r.get("notes"),
    )


class MySQLDailyAttendanceRepository(DailyAttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, key: AttendanceKey) -> Optional[DailyAttendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM daily_attendances
                WHERE employee_id=%s AND organization_id=%s AND work_date=%s
                """,
                (key.employee_id, key.organization_id, key.work_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def apply(self, key: AttendanceKey, mutate: Mutation) -> DailyAttendance:
        for attempt in range(1, APPLY_ATTEMPTS + 1):
            try:
                return self._apply_once(key, mutate)
            except DatabaseError as exc:
                if not is_retryable_write_conflict(exc) or attempt == APPLY_ATTEMPTS:
                    raise
                logger.warning(
                    "Write conflict on daily attendance %s (errno %s, attempt %d/%d); retrying",
                    key, exc.errno, attempt, APPLY_ATTEMPTS,
                )
        raise RuntimeError("unreachable")

    def _apply_once(self, key: AttendanceKey, mutate: Mutation) -> DailyAttendance:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM daily_attendances
                WHERE employee_id=%s AND organization_id=%s AND work_date=%s
                FOR UPDATE
                """,
                (key.employee_id, key.organization_id, key.work_date),
            )
            r = fetchone(cur)
            current = _row_to_record(r) if r else None
            updated = mutate(current)

            if current is None:
                cur.execute(
                    """
                    INSERT INTO daily_attendances(
                        employee_id, organization_id, work_date, status,
                        sign_in_time, sign_out_time, work_duration_minutes, notes
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        key.employee_id,
                        key.organization_id,
                        key.work_date,
                        updated.status.value,
                        updated.sign_in_time,
                        updated.sign_out_time,
                        updated.work_duration_minutes,
                        updated.notes,
                    ),
                )
                return replace(updated, attendance_id=int(cur.lastrowid))

            cur.execute(
                """
                UPDATE daily_attendances
                SET status=%s, sign_in_time=%s, sign_out_time=%s, work_duration_minutes=%s, notes=%s
                WHERE attendance_id=%s
                """,
                (
                    updated.status.value,
                    updated.sign_in_time,
                    updated.sign_out_time,
                    updated.work_duration_minutes,
                    updated.notes,
                    current.attendance_id,
                ),
            )
            return replace(updated, attendance_id=current.attendance_id)

    def list_for_employee(
        self,
        *,
        employee_id: int,
        organization_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 30,
    ) -> Sequence[DailyAttendance]:
        clauses = ["employee_id=%s", "organization_id=%s"]
        params: list[object] = [int(employee_id), int(organization_id)]

        if start_date is not None:
            clauses.append("work_date>=%s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("work_date<=%s")
            params.append(end_date)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM daily_attendances
                WHERE {where}
                ORDER BY work_date DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_row_to_record(r) for r in fetchall(cur)]
