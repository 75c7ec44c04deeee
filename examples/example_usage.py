"""Example: drive the engine through its services, without Flask.

Controllers are thin; the rules live in AttendanceService and LeaveLedger.
"""

from datetime import date, datetime
from decimal import Decimal

from workbeat.container import build_memory_container
from workbeat.employees.memory_employee_repository import InMemoryEmployeeDirectory
from workbeat.employees.model import Employee
from workbeat.leave.memory_leave_repository import InMemoryLeaveTypeRepository
from workbeat.leave.model import LeaveType


def main():
    employees = InMemoryEmployeeDirectory(
        [Employee(employee_id=1, organization_id=1, full_name="Demo", work_schedule={"start": "09:00"})]
    )
    leave_types = InMemoryLeaveTypeRepository(
        [LeaveType(leave_type_id=1, organization_id=1, name="Annual", annual_allocation=Decimal("20"))]
    )
    container = build_memory_container(employees=employees, leave_types=leave_types)

    schedule = employees.get(employee_id=1, organization_id=1).work_schedule
    result = container.attendance_service.record_event(
        1, 1, "sign-in", timestamp=datetime(2099, 1, 5, 9, 7), schedule=schedule
    )
    print(result.to_dict())

    container.leave_ledger.initialize_year(1, 2099)
    req = container.request_service.create_leave(
        organization_id=1,
        employee_id=1,
        leave_type_id=1,
        start_date=date(2099, 1, 5),
        end_date=date(2099, 1, 9),
    )
    print(req.to_dict())
    print(container.leave_ledger.employee_summary(1, 1, 2099))


if __name__ == "__main__":
    main()
