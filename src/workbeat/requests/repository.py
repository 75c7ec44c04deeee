from __future__ import annotations

from datetime import date
from typing import AbstractSet, Optional, Protocol, Sequence

from ..core.enums import LeaveRequestStatus
from .model import LeaveRequest, NewLeaveRequest


class LeaveRequestRepository(Protocol):
    def create(self, request: NewLeaveRequest) -> int:
        raise NotImplementedError

    def get(self, *, request_id: int, organization_id: Optional[int] = None) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def find_overlapping(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        statuses: AbstractSet[LeaveRequestStatus],
    ) -> Sequence[LeaveRequest]:
        """Requests whose [start_date, end_date] intersects the given range (inclusive)."""

        raise NotImplementedError

    def transition(
        self,
        *,
        request_id: int,
        from_statuses: AbstractSet[LeaveRequestStatus],
        to_status: LeaveRequestStatus,
        decided_by: Optional[int] = None,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        """Conditional status update; False when the row is no longer in ``from_statuses``."""

        raise NotImplementedError

    def delete(self, *, request_id: int) -> bool:
        """Only used to undo a create whose ledger step failed."""

        raise NotImplementedError

    def list_requests(
        self,
        *,
        organization_id: int,
        employee_id: Optional[int] = None,
        status: Optional[LeaveRequestStatus] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError
