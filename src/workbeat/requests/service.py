from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional, Sequence, Tuple

from ..common.datetime_utils import now_local, working_days_between
from ..common.validators import require_date_range
from ..core.constants import COMPENSATION_MAX_RETRIES
from ..core.enums import BalanceBucket, LeaveRequestStatus
from ..core.exceptions import InvalidTransition, NotFoundError, OverlapConflict, ValidationError
from ..employees.repository import EmployeeDirectory
from ..leave.ledger import LeaveLedger
from ..leave.repository import LeaveTypeRepository
from .model import LeaveRequest, NewLeaveRequest
from .repository import LeaveRequestRepository

logger = logging.getLogger(__name__)

UndoStep = Tuple[str, Callable[[], object]]


class LeaveRequestService:
    """Request lifecycle coordinator.

    Pairs every request status change with the matching ledger call and
    undoes the first half when the second half fails.
    """

    def __init__(
        self,
        requests: LeaveRequestRepository,
        ledger: LeaveLedger,
        leave_types: LeaveTypeRepository,
        employees: EmployeeDirectory,
    ):
        self._requests = requests
        self._ledger = ledger
        self._leave_types = leave_types
        self._employees = employees

    def _get_request(self, request_id: int, organization_id: int) -> LeaveRequest:
        req = self._requests.get(request_id=int(request_id), organization_id=int(organization_id))
        if not req:
            raise NotFoundError("Leave request not found")
        return req

    # -------- Compensation --------
    def _compensate(self, original: BaseException, steps: Sequence[UndoStep]) -> None:
        """Run every undo step; if any fails, log what is left behind and re-raise ``original``."""
        first_failure: Optional[BaseException] = None
        for description, undo in steps:
            try:
                undo()
            except Exception as exc:
                logger.critical(
                    "Could not undo %s after %s: %s. Request and ledger are out of sync.",
                    description, type(original).__name__, exc,
                )
                if first_failure is None:
                    first_failure = exc
        if first_failure is not None:
            raise original from first_failure

    def _release_step(self, employee_id: int, leave_type_id: int, year: int, days, bucket: BalanceBucket) -> UndoStep:
        return (
            f"{bucket.value} reservation of {days} day(s) "
            f"(employee {employee_id}, leave type {leave_type_id}, year {year})",
            lambda: self._ledger.release(
                employee_id, leave_type_id, year, days, bucket, max_retries=COMPENSATION_MAX_RETRIES
            ),
        )

    def _revert_step(
        self,
        req: LeaveRequest,
        from_status: LeaveRequestStatus,
        to_status: LeaveRequestStatus,
        decided_by: int | None = None,
    ) -> UndoStep:
        def revert() -> None:
            ok = self._requests.transition(
                request_id=req.request_id,
                from_statuses={from_status},
                to_status=to_status,
                decided_by=decided_by,
            )
            if not ok:
                raise InvalidTransition(f"Leave request {req.request_id} is no longer {from_status.value}")

        return f"status of request {req.request_id} ({from_status.value}, should be back to {to_status.value})", revert

    # -------- Lifecycle --------
    def create_leave(
        self,
        *,
        organization_id: int,
        employee_id: int,
        leave_type_id: int,
        start_date: date,
        end_date: date,
        reason: str = "",
        today: date | None = None,
    ) -> LeaveRequest:
        today = today or now_local().date()
        require_date_range(start_date, end_date)
        if start_date < today:
            raise ValidationError("Cannot request leave for past dates")

        employee = self._employees.get(employee_id=int(employee_id), organization_id=int(organization_id))
        if not employee or not employee.is_active:
            raise NotFoundError("Employee not found")

        leave_type = self._leave_types.get(organization_id=int(organization_id), leave_type_id=int(leave_type_id))
        if not leave_type or not leave_type.is_active:
            raise NotFoundError("Leave type not found")

        days = working_days_between(start_date, end_date)
        if days <= 0:
            raise ValidationError("Requested range contains no working days")

        self._ledger.ensure_no_overlap(employee.employee_id, start_date, end_date)

        year = start_date.year
        self._ledger.reserve(employee.employee_id, leave_type.leave_type_id, year, days)
        bucket = BalanceBucket.PENDING
        status = LeaveRequestStatus.PENDING
        request_id: Optional[int] = None
        try:
            if not leave_type.requires_approval:
                self._ledger.commit(employee.employee_id, leave_type.leave_type_id, year, days)
                bucket = BalanceBucket.APPROVED
                status = LeaveRequestStatus.APPROVED

            request_id = self._requests.create(
                NewLeaveRequest(
                    employee_id=employee.employee_id,
                    organization_id=int(organization_id),
                    leave_type_id=leave_type.leave_type_id,
                    start_date=start_date,
                    end_date=end_date,
                    days_requested=days,
                    status=status,
                    reason=(reason or "").strip() or None,
                )
            )

            # A concurrent create may have slipped past the first overlap check.
            conflicts = self._ledger.find_overlaps(
                employee.employee_id, start_date, end_date, exclude_request_id=request_id
            )
            if conflicts:
                raise OverlapConflict([r.request_id for r in conflicts])
        except Exception as exc:
            logger.info("Rolling back leave request for employee %s (%s..%s)", employee_id, start_date, end_date)
            steps = []
            if request_id is not None:
                created_id = request_id
                steps.append((f"request {created_id}", lambda: self._requests.delete(request_id=created_id)))
            steps.append(self._release_step(employee.employee_id, leave_type.leave_type_id, year, days, bucket))
            self._compensate(exc, steps)
            raise

        logger.info(
            "Leave request %s created for employee %s: %s day(s), %s",
            request_id, employee_id, days, status.value,
        )
        return self._get_request(request_id, organization_id)

    def approve_leave(self, *, organization_id: int, request_id: int, decided_by: int | None = None) -> LeaveRequest:
        req = self._get_request(request_id, organization_id)
        ok = self._requests.transition(
            request_id=req.request_id,
            from_statuses={LeaveRequestStatus.PENDING},
            to_status=LeaveRequestStatus.APPROVED,
            decided_by=decided_by,
        )
        if not ok:
            raise InvalidTransition("Leave request not found or already processed")

        try:
            self._ledger.commit(req.employee_id, req.leave_type_id, req.year, req.days_requested)
        except Exception as exc:
            self._compensate(exc, [self._revert_step(req, LeaveRequestStatus.APPROVED, LeaveRequestStatus.PENDING)])
            raise

        logger.info("Leave request %s approved by %s", req.request_id, decided_by)
        return self._get_request(request_id, organization_id)

    def reject_leave(
        self,
        *,
        organization_id: int,
        request_id: int,
        decided_by: int | None = None,
        rejection_reason: str = "",
    ) -> LeaveRequest:
        req = self._get_request(request_id, organization_id)
        ok = self._requests.transition(
            request_id=req.request_id,
            from_statuses={LeaveRequestStatus.PENDING},
            to_status=LeaveRequestStatus.REJECTED,
            decided_by=decided_by,
            rejection_reason=(rejection_reason or "").strip() or None,
        )
        if not ok:
            raise InvalidTransition("Leave request not found or already processed")

        try:
            self._ledger.release(
                req.employee_id, req.leave_type_id, req.year, req.days_requested, BalanceBucket.PENDING
            )
        except Exception as exc:
            self._compensate(exc, [self._revert_step(req, LeaveRequestStatus.REJECTED, LeaveRequestStatus.PENDING)])
            raise

        logger.info("Leave request %s rejected by %s", req.request_id, decided_by)
        return self._get_request(request_id, organization_id)

    def cancel_leave(self, *, organization_id: int, request_id: int, today: date | None = None) -> LeaveRequest:
        today = today or now_local().date()
        req = self._get_request(request_id, organization_id)
        if req.status not in (LeaveRequestStatus.PENDING, LeaveRequestStatus.APPROVED):
            raise InvalidTransition("Leave request cannot be cancelled")
        if req.start_date <= today:
            raise InvalidTransition("Cannot cancel leave that has already started")

        previous = req.status
        ok = self._requests.transition(
            request_id=req.request_id,
            from_statuses={previous},
            to_status=LeaveRequestStatus.CANCELLED,
            decided_by=req.decided_by,
        )
        if not ok:
            raise InvalidTransition("Leave request changed while cancelling; reload and retry")

        try:
            self._ledger.release(
                req.employee_id, req.leave_type_id, req.year, req.days_requested, BalanceBucket(previous.value)
            )
        except Exception as exc:
            self._compensate(
                exc, [self._revert_step(req, LeaveRequestStatus.CANCELLED, previous, decided_by=req.decided_by)]
            )
            raise

        logger.info("Leave request %s cancelled (was %s)", req.request_id, previous.value)
        return self._get_request(request_id, organization_id)

    def list_requests(
        self,
        *,
        organization_id: int,
        employee_id: int | None = None,
        status: LeaveRequestStatus | str | None = None,
        limit: int = 200,
    ) -> list[dict]:
        try:
            status_filter = LeaveRequestStatus(status) if status else None
        except ValueError:
            raise ValidationError(f"Unknown leave request status: {status!r}")

        rows = self._requests.list_requests(
            organization_id=int(organization_id),
            employee_id=int(employee_id) if employee_id is not None else None,
            status=status_filter,
            limit=int(limit),
        )
        return [r.to_dict() for r in rows]
