from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType
from typing import Any, Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.memory_attendance_repository import InMemoryDailyAttendanceRepository
from .attendance.mysql_attendance_repository import MySQLDailyAttendanceRepository
from .attendance.repository import DailyAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import (
    DEFAULT_HALF_DAY_THRESHOLD_MINUTES,
    DEFAULT_LATE_GRACE_MINUTES,
    DEFAULT_LEDGER_MAX_RETRIES,
)
from .database.connection import DatabaseConnection, DBConfig
from .employees.memory_employee_repository import InMemoryEmployeeDirectory
from .employees.mysql_employee_repository import MySQLEmployeeDirectory
from .employees.repository import EmployeeDirectory
from .leave.ledger import LeaveLedger
from .leave.memory_leave_repository import InMemoryLeaveBalanceRepository, InMemoryLeaveTypeRepository
from .leave.mysql_leave_balance_repository import MySQLLeaveBalanceRepository
from .leave.mysql_leave_type_repository import MySQLLeaveTypeRepository
from .leave.repository import LeaveBalanceRepository, LeaveTypeRepository
from .requests.memory_request_repository import InMemoryLeaveRequestRepository
from .requests.mysql_request_repository import MySQLLeaveRequestRepository
from .requests.repository import LeaveRequestRepository
from .requests.service import LeaveRequestService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    employees_repo: EmployeeDirectory
    attendance_repo: DailyAttendanceRepository
    leave_types_repo: LeaveTypeRepository
    balances_repo: LeaveBalanceRepository
    requests_repo: LeaveRequestRepository

    attendance_service: AttendanceService
    leave_ledger: LeaveLedger
    request_service: LeaveRequestService


def _setting(settings: Any, name: str, default: Any) -> Any:
    return getattr(settings, name, default) if settings is not None else default


def _wire(
    *,
    conn: Optional[DatabaseConnection],
    employees_repo: EmployeeDirectory,
    attendance_repo: DailyAttendanceRepository,
    leave_types_repo: LeaveTypeRepository,
    balances_repo: LeaveBalanceRepository,
    requests_repo: LeaveRequestRepository,
    settings: ModuleType | None,
) -> Container:
    attendance_service = AttendanceService(
        attendance_repo,
        strategy_factory=AttendanceStrategyFactory(
            grace_minutes=int(_setting(settings, "LATE_GRACE_MINUTES", DEFAULT_LATE_GRACE_MINUTES)),
            half_day_threshold_minutes=int(
                _setting(settings, "HALF_DAY_THRESHOLD_MINUTES", DEFAULT_HALF_DAY_THRESHOLD_MINUTES)
            ),
        ),
    )
    leave_ledger = LeaveLedger(
        balances_repo,
        requests_repo,
        leave_types_repo,
        employees_repo,
        max_retries=int(_setting(settings, "LEDGER_MAX_RETRIES", DEFAULT_LEDGER_MAX_RETRIES)),
    )
    request_service = LeaveRequestService(requests_repo, leave_ledger, leave_types_repo, employees_repo)

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        leave_types_repo=leave_types_repo,
        balances_repo=balances_repo,
        requests_repo=requests_repo,
        attendance_service=attendance_service,
        leave_ledger=leave_ledger,
        request_service=request_service,
    )


def build_container(*, db_config: dict, settings: ModuleType | None = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return _wire(
        conn=conn,
        employees_repo=MySQLEmployeeDirectory(conn),
        attendance_repo=MySQLDailyAttendanceRepository(conn),
        leave_types_repo=MySQLLeaveTypeRepository(conn),
        balances_repo=MySQLLeaveBalanceRepository(conn),
        requests_repo=MySQLLeaveRequestRepository(conn),
        settings=settings,
    )


def build_memory_container(
    *,
    settings: ModuleType | None = None,
    employees: InMemoryEmployeeDirectory | None = None,
    leave_types: InMemoryLeaveTypeRepository | None = None,
    balances: InMemoryLeaveBalanceRepository | None = None,
) -> Container:
    """Process-local wiring used by tests and the ``memory`` storage backend."""
    return _wire(
        conn=None,
        employees_repo=employees if employees is not None else InMemoryEmployeeDirectory(),
        attendance_repo=InMemoryDailyAttendanceRepository(),
        leave_types_repo=leave_types if leave_types is not None else InMemoryLeaveTypeRepository(),
        balances_repo=balances if balances is not None else InMemoryLeaveBalanceRepository(),
        requests_repo=InMemoryLeaveRequestRepository(),
        settings=settings,
    )
