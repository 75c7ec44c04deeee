from datetime import date, datetime

import pytest

from workbeat.attendance.memory_attendance_repository import InMemoryDailyAttendanceRepository
from workbeat.attendance.service import AttendanceService, append_note
from workbeat.core.constants import SIGN_OUT_BEFORE_SIGN_IN_NOTE
from workbeat.core.enums import AttendanceStatus, EventType
from workbeat.core.exceptions import ValidationError

SCHEDULE = {"start": "09:00"}


@pytest.fixture
def service():
    return AttendanceService(InMemoryDailyAttendanceRepository())


def at(hour, minute=0, second=0, day=4):
    return datetime(2024, 3, day, hour, minute, second)


def test_sign_in_within_grace_is_present(service):
    result = service.record_event(1, 1, EventType.SIGN_IN, timestamp=at(9, 3), schedule=SCHEDULE)

    assert result.is_late is False
    assert result.record.status == AttendanceStatus.PRESENT
    assert result.record.sign_in_time == at(9, 3)
    assert result.record.work_date == date(2024, 3, 4)
    assert result.record.attendance_id is not None


def test_sign_in_after_grace_is_late(service):
    result = service.record_event(1, 1, "sign-in", timestamp=at(9, 7), schedule=SCHEDULE)

    assert result.is_late is True
    assert result.record.status == AttendanceStatus.LATE


def test_full_day_sets_duration_and_keeps_status(service):
    service.record_event(1, 1, EventType.SIGN_IN, timestamp=at(9, 0), schedule=SCHEDULE)
    result = service.record_event(1, 1, EventType.SIGN_OUT, timestamp=at(17, 30, 30), schedule=SCHEDULE)

    assert result.is_late is False
    assert result.record.work_duration_minutes == 511
    assert result.record.status == AttendanceStatus.PRESENT


def test_late_day_stays_late_after_full_shift(service):
    service.record_event(1, 1, EventType.SIGN_IN, timestamp=at(9, 30), schedule=SCHEDULE)
    result = service.record_event(1, 1, EventType.SIGN_OUT, timestamp=at(18, 0), schedule=SCHEDULE)

    assert result.record.status == AttendanceStatus.LATE
    assert result.record.work_duration_minutes == 510


def test_short_day_is_half_day(service):
    service.record_event(1, 1, EventType.SIGN_IN, timestamp=at(9, 0), schedule=SCHEDULE)
    result = service.record_event(1, 1, EventType.SIGN_OUT, timestamp=at(12, 59), schedule=SCHEDULE)

    assert result.record.work_duration_minutes == 239
    assert result.record.status == AttendanceStatus.HALF_DAY


def test_exactly_threshold_is_not_half_day(service):
    service.record_event(1, 1, EventType.SIGN_IN, timestamp=at(9, 0), schedule=SCHEDULE)
    result = service.record_event(1, 1, EventType.SIGN_OUT, timestamp=at(13, 0), schedule=SCHEDULE)

    assert result.record.work_duration_minutes == 240
    assert result.record.status == AttendanceStatus.PRESENT


def test_half_day_is_sticky(service):
    service.record_event(1, 1, EventType.SIGN_IN, timestamp=at(9, 0), schedule=SCHEDULE)
    service.record_event(1, 1, EventType.SIGN_OUT, timestamp=at(10, 0), schedule=SCHEDULE)
    result = service.record_event(1, 1, EventType.SIGN_OUT, timestamp=at(18, 0), schedule=SCHEDULE)

    assert result.record.work_duration_minutes == 540
    assert result.record.status == AttendanceStatus.HALF_DAY


def test_sign_out_without_sign_in_creates_row(service):
    result = service.record_event(1, 1, EventType.SIGN_OUT, timestamp=at(17, 0), schedule=SCHEDULE)

    assert result.is_late is False
    assert result.record.status == AttendanceStatus.PRESENT
    assert result.record.sign_in_time is None
    assert result.record.sign_out_time == at(17, 0)
    assert result.record.work_duration_minutes is None


def test_late_sign_in_after_sign_out_fills_duration(service):
    service.record_event(1, 1, EventType.SIGN_OUT, timestamp=at(17, 0), schedule=SCHEDULE)
    result = service.record_event(1, 1, EventType.SIGN_IN, timestamp=at(9, 0), schedule=SCHEDULE)

    assert result.record.work_duration_minutes == 480
    assert result.record.status == AttendanceStatus.PRESENT


def test_sign_out_before_sign_in_is_flagged(service, caplog):
    service.record_event(1, 1, EventType.SIGN_IN, timestamp=at(12, 0), schedule=SCHEDULE)
    with caplog.at_level("WARNING", logger="workbeat"):
        result = service.record_event(1, 1, EventType.SIGN_OUT, timestamp=at(11, 0), schedule=SCHEDULE)

    assert result.record.work_duration_minutes is None
    assert result.record.sign_out_time == at(11, 0)
    assert SIGN_OUT_BEFORE_SIGN_IN_NOTE in result.record.notes
    assert any("precedes sign-in" in r.getMessage() for r in caplog.records)

    again = service.record_event(1, 1, EventType.SIGN_OUT, timestamp=at(11, 30), schedule=SCHEDULE)
    assert again.record.notes.count(SIGN_OUT_BEFORE_SIGN_IN_NOTE) == 1


def test_notes_are_appended(service):
    service.record_event(1, 1, EventType.SIGN_IN, timestamp=at(9, 0), schedule=SCHEDULE, notes="badge")
    result = service.record_event(1, 1, EventType.SIGN_OUT, timestamp=at(17, 0), schedule=SCHEDULE, notes="  left  ")

    assert result.record.notes == "badge; left"


def test_unknown_event_type_rejected(service):
    with pytest.raises(ValidationError):
        service.record_event(1, 1, "lunch", timestamp=at(12, 0), schedule=SCHEDULE)


def test_malformed_schedule_never_late(service):
    result = service.record_event(1, 1, EventType.SIGN_IN, timestamp=at(23, 0), schedule="not json at all")

    assert result.is_late is False
    assert result.record.status == AttendanceStatus.PRESENT


def test_weekday_schedule_applies_per_day(service):
    schedule = {"monday": {"start": "08:00"}, "tuesday": {"start": "10:00"}}

    monday = service.record_event(1, 1, EventType.SIGN_IN, timestamp=at(9, 0, day=4), schedule=schedule)
    tuesday = service.record_event(1, 1, EventType.SIGN_IN, timestamp=at(9, 0, day=5), schedule=schedule)

    assert monday.is_late is True
    assert tuesday.is_late is False


def test_days_are_kept_apart(service):
    service.record_event(1, 1, EventType.SIGN_IN, timestamp=at(9, 0, day=4), schedule=SCHEDULE)
    service.record_event(1, 1, EventType.SIGN_IN, timestamp=at(9, 0, day=5), schedule=SCHEDULE)
    service.record_event(2, 1, EventType.SIGN_IN, timestamp=at(9, 0, day=5), schedule=SCHEDULE)

    history = service.get_history(1, 1)

    assert [row["date"] for row in history] == ["2024-03-05", "2024-03-04"]
    assert service.get_day_record(1, 1, date(2024, 3, 4)).sign_in_time == at(9, 0, day=4)
    assert service.get_day_record(1, 1, date(2024, 3, 6)) is None


def test_history_respects_range_and_limit(service):
    for day in (4, 5, 6, 7):
        service.record_event(1, 1, EventType.SIGN_IN, timestamp=at(9, 0, day=day), schedule=SCHEDULE)

    rows = service.get_history(1, 1, start_date=date(2024, 3, 5), end_date=date(2024, 3, 7), limit=2)

    assert [row["date"] for row in rows] == ["2024-03-07", "2024-03-06"]


def test_append_note():
    assert append_note(None, None) is None
    assert append_note("a", None) == "a"
    assert append_note(None, "b") == "b"
    assert append_note("a", "b") == "a; b"


def test_missing_timestamp_uses_current_time(service, fixed_now, monkeypatch):
    monkeypatch.setattr("workbeat.attendance.service.now_local", lambda: fixed_now)

    result = service.record_event(1, 1, EventType.SIGN_IN, schedule=SCHEDULE)

    assert result.record.sign_in_time == fixed_now
    assert result.record.work_date == fixed_now.date()
