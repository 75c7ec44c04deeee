from datetime import datetime, time

from workbeat.attendance.factory import AttendanceStrategyFactory
from workbeat.attendance.strategies.half_day_strategy import HalfDayStrategy
from workbeat.attendance.strategies.late_strategy import LateStrategy
from workbeat.attendance.strategies.normal_strategy import NormalStrategy
from workbeat.core.enums import AttendanceStatus
from workbeat.schedules.model import WorkSchedule


def test_factory_sign_in_on_time_at_grace_boundary():
    schedule = WorkSchedule.daily(time(9, 0))
    now = datetime(2024, 3, 4, 9, 5, 0)

    strategy = AttendanceStrategyFactory().for_sign_in(timestamp=now, schedule=schedule)

    assert isinstance(strategy, NormalStrategy)


def test_factory_sign_in_late_after_grace():
    schedule = WorkSchedule.daily(time(9, 0))
    now = datetime(2024, 3, 4, 9, 6, 0)

    strategy = AttendanceStrategyFactory().for_sign_in(timestamp=now, schedule=schedule)

    assert isinstance(strategy, LateStrategy)
    assert strategy.decide_sign_in(current=None).is_late is True


def test_factory_respects_configured_grace():
    schedule = WorkSchedule.daily(time(9, 0))
    factory = AttendanceStrategyFactory(grace_minutes=0)

    assert isinstance(factory.for_sign_in(timestamp=datetime(2024, 3, 4, 9, 0), schedule=schedule), NormalStrategy)
    assert isinstance(factory.for_sign_in(timestamp=datetime(2024, 3, 4, 9, 0, 1), schedule=schedule), LateStrategy)


def test_factory_without_schedule_is_never_late():
    strategy = AttendanceStrategyFactory().for_sign_in(timestamp=datetime(2024, 3, 4, 23, 59), schedule=None)

    assert isinstance(strategy, NormalStrategy)


def test_factory_weekday_without_start_is_never_late():
    # Monday only; 2024-03-05 is a Tuesday.
    schedule = WorkSchedule(start=None, weekday_starts={0: time(8, 0)})

    strategy = AttendanceStrategyFactory().for_sign_in(timestamp=datetime(2024, 3, 5, 11, 0), schedule=schedule)

    assert isinstance(strategy, NormalStrategy)


def test_factory_sign_out_half_day_threshold():
    factory = AttendanceStrategyFactory()

    assert isinstance(factory.for_sign_out(work_duration_minutes=239), HalfDayStrategy)
    assert isinstance(factory.for_sign_out(work_duration_minutes=240), NormalStrategy)
    assert isinstance(factory.for_sign_out(work_duration_minutes=None), NormalStrategy)


def test_strategies_keep_status_on_sign_out():
    assert NormalStrategy().decide_sign_out(current=AttendanceStatus.LATE).status == AttendanceStatus.LATE
    assert LateStrategy().decide_sign_out(current=AttendanceStatus.PRESENT).status == AttendanceStatus.PRESENT
    assert HalfDayStrategy().decide_sign_out(current=AttendanceStatus.LATE).status == AttendanceStatus.HALF_DAY
