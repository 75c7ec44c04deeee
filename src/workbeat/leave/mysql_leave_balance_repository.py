from __future__ import annotations

from decimal import Decimal
from typing import AbstractSet, Optional, Sequence, Tuple

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal
from .model import BalanceKey, LeaveBalance, NewBalance
from .repository import LeaveBalanceRepository

_SELECT = """
    SELECT b.balance_id, b.employee_id, b.organization_id, b.leave_type_id, b.year,
           b.allocated_days, b.used_days, b.pending_days, b.version,
           lt.name AS leave_type_name
    FROM leave_balances b
    LEFT JOIN leave_types lt ON lt.leave_type_id = b.leave_type_id
"""


def _row_to_balance(r: dict) -> LeaveBalance:
    return LeaveBalance(
        balance_id=int(r["balance_id"]),
        employee_id=int(r["employee_id"]),
        organization_id=int(r["organization_id"]),
        leave_type_id=int(r["leave_type_id"]),
        year=int(r["year"]),
        allocated_days=to_decimal(r["allocated_days"]),
        used_days=to_decimal(r["used_days"]),
        pending_days=to_decimal(r["pending_days"]),
        version=int(r["version"]),
        leave_type_name=r.get("leave_type_name"),
    )


class MySQLLeaveBalanceRepository(LeaveBalanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, key: BalanceKey) -> Optional[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE b.employee_id=%s AND b.leave_type_id=%s AND b.year=%s",
                (key.employee_id, key.leave_type_id, key.year),
            )
            r = fetchone(cur)
            return _row_to_balance(r) if r else None

    def compare_and_set(
        self,
        *,
        balance_id: int,
        expected_version: int,
        allocated_days: Decimal,
        used_days: Decimal,
        pending_days: Decimal,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_balances
                SET allocated_days=%s, used_days=%s, pending_days=%s, version=version+1
                WHERE balance_id=%s AND version=%s
                """,
                (allocated_days, used_days, pending_days, int(balance_id), int(expected_version)),
            )
            return cur.rowcount > 0

    def list_for_employee(self, *, employee_id: int, organization_id: int, year: int) -> Sequence[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT
                + """
                WHERE b.employee_id=%s AND b.organization_id=%s AND b.year=%s
                ORDER BY lt.name ASC, b.leave_type_id ASC
                """,
                (int(employee_id), int(organization_id), int(year)),
            )
            return [_row_to_balance(r) for r in fetchall(cur)]

    def existing_keys(self, *, organization_id: int, year: int) -> AbstractSet[Tuple[int, int]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT employee_id, leave_type_id FROM leave_balances WHERE organization_id=%s AND year=%s",
                (int(organization_id), int(year)),
            )
            return {(int(r["employee_id"]), int(r["leave_type_id"])) for r in fetchall(cur)}

    def create_missing(self, rows: Sequence[NewBalance]) -> int:
        created = 0
        with db_cursor(self._conn_factory) as (_, cur):
            for row in rows:
                # INSERT IGNORE on the unique (employee, leave type, year) key: never overwrites.
                cur.execute(
                    """
                    INSERT IGNORE INTO leave_balances(
                        employee_id, organization_id, leave_type_id, year,
                        allocated_days, used_days, pending_days, version
                    )
                    VALUES(%s,%s,%s,%s,%s,0,0,0)
                    """,
                    (row.employee_id, row.organization_id, row.leave_type_id, row.year, row.allocated_days),
                )
                created += cur.rowcount
        return created
