from __future__ import annotations

from decimal import Decimal
from typing import Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced row does not exist."""


class BalanceNotFound(NotFoundError):
    """No leave balance row for (employee, leave type, year)."""

    def __init__(self, employee_id: int, leave_type_id: int, year: int):
        super().__init__(
            f"No leave balance for employee {employee_id}, leave type {leave_type_id}, year {year}"
        )
        self.employee_id = employee_id
        self.leave_type_id = leave_type_id
        self.year = year


class InsufficientBalance(DomainError):
    """Requested leave days exceed the remaining balance."""

    def __init__(self, requested: Decimal, available: Decimal):
        super().__init__(
            f"Insufficient leave balance. Available: {available} days, Requested: {requested} days"
        )
        self.requested = requested
        self.available = available


class OverlapConflict(DomainError):
    """New request's date range intersects an active request."""

    def __init__(self, conflicting_ids: Sequence[int] = ()):
        super().__init__("Leave request overlaps with existing request")
        self.conflicting_ids = tuple(conflicting_ids)


class InvalidTransition(DomainError):
    """Request is not in a status the requested transition accepts."""


class ConcurrencyConflict(DomainError):
    """Optimistic update kept losing to concurrent writers."""


class InvariantViolation(DomainError):
    """A ledger mutation would drive a counter negative.

    Indicates a lifecycle bug in the caller; the mutation is refused.
    """
