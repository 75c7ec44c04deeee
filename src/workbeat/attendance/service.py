from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Optional, Tuple

from ..common.datetime_utils import minutes_between, now_local, to_local_naive
from ..core.constants import DEFAULT_HISTORY_LIMIT, NOTES_SEPARATOR, SIGN_OUT_BEFORE_SIGN_IN_NOTE
from ..core.enums import AttendanceStatus, EventType
from ..core.exceptions import ValidationError
from ..schedules.model import WorkSchedule
from ..schedules.resolver import resolve_schedule
from .factory import AttendanceStrategyFactory
from .model import AttendanceEventResult, AttendanceKey, DailyAttendance
from .repository import DailyAttendanceRepository

logger = logging.getLogger(__name__)


def append_note(existing: Optional[str], note: Optional[str]) -> Optional[str]:
    if not note:
        return existing
    if not existing:
        return note
    return f"{existing}{NOTES_SEPARATOR}{note}"


class AttendanceService:
    """Turns one raw sign-in/sign-out event into an update of the day's row.

    The schedule is always supplied by the caller; nothing is looked up here.
    """

    def __init__(
        self,
        attendance: DailyAttendanceRepository,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
    ):
        self._attendance = attendance
        self._factory = strategy_factory or AttendanceStrategyFactory()

    @staticmethod
    def _coerce_event_type(value: Any) -> EventType:
        try:
            return EventType(value)
        except ValueError:
            raise ValidationError(f"Unknown attendance event type: {value!r}")

    def record_event(
        self,
        employee_id: int,
        organization_id: int,
        event_type: EventType | str,
        *,
        timestamp: datetime | None = None,
        schedule: Any = None,
        notes: str | None = None,
    ) -> AttendanceEventResult:
        kind = self._coerce_event_type(event_type)
        moment = to_local_naive(timestamp) if timestamp is not None else now_local()
        work_schedule = resolve_schedule(schedule)
        note = (notes or "").strip() or None
        key = AttendanceKey(int(employee_id), int(organization_id), moment.date())

        outcome = {"is_late": False}

        def mutate(current: Optional[DailyAttendance]) -> DailyAttendance:
            if kind == EventType.SIGN_IN:
                record, is_late = self._apply_sign_in(key, current, moment, work_schedule, note)
            else:
                record, is_late = self._apply_sign_out(key, current, moment, note), False
            outcome["is_late"] = is_late
            return record

        record = self._attendance.apply(key, mutate)
        logger.info(
            "Recorded %s for employee %s (org %s) on %s: status=%s%s",
            kind.value,
            key.employee_id,
            key.organization_id,
            key.work_date,
            record.status.value,
            " (late)" if outcome["is_late"] else "",
        )
        return AttendanceEventResult(record=record, is_late=outcome["is_late"])

    def _apply_sign_in(
        self,
        key: AttendanceKey,
        current: Optional[DailyAttendance],
        moment: datetime,
        schedule: Optional[WorkSchedule],
        note: Optional[str],
    ) -> Tuple[DailyAttendance, bool]:
        strategy = self._factory.for_sign_in(timestamp=moment, schedule=schedule)
        decision = strategy.decide_sign_in(current=current.status if current else None)

        if current is None:
            record = DailyAttendance(
                employee_id=key.employee_id,
                organization_id=key.organization_id,
                work_date=key.work_date,
                status=decision.status,
                sign_in_time=moment,
                notes=note,
            )
            return record, decision.is_late

        status = decision.status
        if current.status == AttendanceStatus.HALF_DAY:
            status = AttendanceStatus.HALF_DAY

        notes = append_note(current.notes, note)
        duration = current.work_duration_minutes
        if current.sign_out_time is not None:
            duration, status, notes = self._settle_day(moment, current.sign_out_time, status, notes)

        record = replace(
            current,
            status=status,
            sign_in_time=moment,
            work_duration_minutes=duration,
            notes=notes,
        )
        return record, decision.is_late

    def _apply_sign_out(
        self,
        key: AttendanceKey,
        current: Optional[DailyAttendance],
        moment: datetime,
        note: Optional[str],
    ) -> DailyAttendance:
        if current is None:
            # Sign-out without a sign-in that day: keep the row, never guess lateness.
            return DailyAttendance(
                employee_id=key.employee_id,
                organization_id=key.organization_id,
                work_date=key.work_date,
                status=AttendanceStatus.PRESENT,
                sign_out_time=moment,
                notes=note,
            )

        notes = append_note(current.notes, note)
        status = current.status
        duration = current.work_duration_minutes
        if current.sign_in_time is not None:
            duration, status, notes = self._settle_day(current.sign_in_time, moment, status, notes)

        return replace(
            current,
            status=status,
            sign_out_time=moment,
            work_duration_minutes=duration,
            notes=notes,
        )

    def _settle_day(
        self,
        sign_in: datetime,
        sign_out: datetime,
        status: AttendanceStatus,
        notes: Optional[str],
    ) -> Tuple[Optional[int], AttendanceStatus, Optional[str]]:
        if sign_out < sign_in:
            logger.warning(
                "Sign-out %s precedes sign-in %s; duration left empty for review",
                sign_out.isoformat(),
                sign_in.isoformat(),
            )
            if SIGN_OUT_BEFORE_SIGN_IN_NOTE not in (notes or ""):
                notes = append_note(notes, SIGN_OUT_BEFORE_SIGN_IN_NOTE)
            return None, status, notes

        duration = minutes_between(sign_in, sign_out)
        decision = self._factory.for_sign_out(work_duration_minutes=duration).decide_sign_out(current=status)
        return duration, decision.status, notes

    def get_day_record(self, employee_id: int, organization_id: int, work_date: date) -> Optional[DailyAttendance]:
        return self._attendance.get(AttendanceKey(int(employee_id), int(organization_id), work_date))

    def get_history(
        self,
        employee_id: int,
        organization_id: int,
        *,
        start_date: date | None = None,
        end_date: date | None = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> list[dict]:
        rows = self._attendance.list_for_employee(
            employee_id=int(employee_id),
            organization_id=int(organization_id),
            start_date=start_date,
            end_date=end_date,
            limit=int(limit),
        )
        return [r.to_dict() for r in rows]
