from __future__ import annotations

import itertools
import threading
from dataclasses import replace
from datetime import date
from typing import AbstractSet, Dict, Optional, Sequence

from ..common.datetime_utils import now_local, ranges_overlap
from ..core.enums import LeaveRequestStatus
from .model import LeaveRequest, NewLeaveRequest
from .repository import LeaveRequestRepository


class InMemoryLeaveRequestRepository(LeaveRequestRepository):
    def __init__(self):
        self._rows: Dict[int, LeaveRequest] = {}
        self._lock = threading.Lock()
        self._ids = itertools.count(1)

    def create(self, request: NewLeaveRequest) -> int:
        with self._lock:
            request_id = next(self._ids)
            self._rows[request_id] = LeaveRequest(
                request_id=request_id,
                employee_id=request.employee_id,
                organization_id=request.organization_id,
                leave_type_id=request.leave_type_id,
                start_date=request.start_date,
                end_date=request.end_date,
                days_requested=request.days_requested,
                status=request.status,
                reason=request.reason,
                created_at=now_local(),
            )
            return request_id

    def get(self, *, request_id: int, organization_id: Optional[int] = None) -> Optional[LeaveRequest]:
        r = self._rows.get(int(request_id))
        if r is None or (organization_id is not None and r.organization_id != int(organization_id)):
            return None
        return r

    def find_overlapping(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        statuses: AbstractSet[LeaveRequestStatus],
    ) -> Sequence[LeaveRequest]:
        return [
            r
            for r in self._rows.values()
            if r.employee_id == employee_id
            and r.status in statuses
            and ranges_overlap(r.start_date, r.end_date, start_date, end_date)
        ]

    def transition(
        self,
        *,
        request_id: int,
        from_statuses: AbstractSet[LeaveRequestStatus],
        to_status: LeaveRequestStatus,
        decided_by: Optional[int] = None,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        with self._lock:
            r = self._rows.get(int(request_id))
            if r is None or r.status not in from_statuses:
                return False
            decided = to_status != LeaveRequestStatus.PENDING
            self._rows[r.request_id] = replace(
                r,
                status=to_status,
                decided_by=decided_by if decided else None,
                decided_at=now_local() if decided else None,
                rejection_reason=rejection_reason if to_status == LeaveRequestStatus.REJECTED else None,
            )
            return True

    def delete(self, *, request_id: int) -> bool:
        with self._lock:
            return self._rows.pop(int(request_id), None) is not None

    def list_requests(
        self,
        *,
        organization_id: int,
        employee_id: Optional[int] = None,
        status: Optional[LeaveRequestStatus] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        items = [
            r
            for r in self._rows.values()
            if r.organization_id == organization_id
            and (employee_id is None or r.employee_id == employee_id)
            and (status is None or r.status == status)
        ]
        items.sort(key=lambda r: r.request_id, reverse=True)
        return items[:limit]
