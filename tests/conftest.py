from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from workbeat.container import build_memory_container
from workbeat.employees.memory_employee_repository import InMemoryEmployeeDirectory
from workbeat.employees.model import Employee
from workbeat.leave.memory_leave_repository import InMemoryLeaveBalanceRepository, InMemoryLeaveTypeRepository
from workbeat.leave.model import LeaveBalance, LeaveType

ORG = 1
ALICE = 10
BOB = 11
ANNUAL = 100
SICK = 200


@pytest.fixture
def fixed_now():
    return datetime(2024, 3, 4, 9, 0, 0)


@pytest.fixture
def employees():
    return InMemoryEmployeeDirectory(
        [
            Employee(employee_id=ALICE, organization_id=ORG, full_name="Alice", work_schedule={"start": "09:00"}),
            Employee(
                employee_id=BOB,
                organization_id=ORG,
                full_name="Bob",
                work_schedule='{"days": ["monday"], "hours": {"start": "08:00", "end": "17:00"}}',
            ),
        ]
    )


@pytest.fixture
def leave_types():
    return InMemoryLeaveTypeRepository(
        [
            LeaveType(leave_type_id=ANNUAL, organization_id=ORG, name="Annual", annual_allocation=Decimal("20")),
            LeaveType(
                leave_type_id=SICK,
                organization_id=ORG,
                name="Sick",
                annual_allocation=Decimal("10"),
                requires_approval=False,
            ),
        ]
    )


def make_balance(employee_id=ALICE, leave_type_id=ANNUAL, year=2024, allocated="20", used="0", pending="0"):
    return LeaveBalance(
        balance_id=0,
        employee_id=employee_id,
        organization_id=ORG,
        leave_type_id=leave_type_id,
        year=year,
        allocated_days=Decimal(allocated),
        used_days=Decimal(used),
        pending_days=Decimal(pending),
    )


@pytest.fixture
def balances():
    return InMemoryLeaveBalanceRepository(
        [
            make_balance(ALICE, ANNUAL, 2024, allocated="20"),
            make_balance(ALICE, SICK, 2024, allocated="10"),
        ]
    )


@pytest.fixture
def container(employees, leave_types, balances):
    return build_memory_container(employees=employees, leave_types=leave_types, balances=balances)
