from datetime import date, datetime, time, timedelta, timezone

import pytest

from workbeat.common.datetime_utils import (
    minutes_between,
    parse_hhmm,
    parse_iso_date,
    parse_iso_datetime,
    ranges_overlap,
    to_local_naive,
    working_days_between,
)
from workbeat.common.validators import as_days, require_int, require_positive_days
from workbeat.core.exceptions import ValidationError


def test_parse_iso_datetime_accepts_z_suffix():
    parsed = parse_iso_datetime("2024-03-04T09:00:00Z")

    assert parsed.tzinfo is not None
    assert parsed.utcoffset() == timedelta(0)


def test_to_local_naive():
    naive = datetime(2024, 3, 4, 9, 0)
    aware = datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)

    assert to_local_naive(naive) is naive
    assert to_local_naive(aware).tzinfo is None


def test_parse_hhmm():
    assert parse_hhmm("09:00") == time(9, 0)
    assert parse_hhmm("8:30:15") == time(8, 30, 15)
    assert parse_hhmm("25:00") is None
    assert parse_hhmm("nine") is None
    assert parse_hhmm(900) is None


def test_minutes_between_rounds_half_up():
    start = datetime(2024, 3, 4, 9, 0, 0)

    assert minutes_between(start, datetime(2024, 3, 4, 9, 0, 29)) == 0
    assert minutes_between(start, datetime(2024, 3, 4, 9, 0, 30)) == 1
    assert minutes_between(start, datetime(2024, 3, 4, 8, 0)) == -60


def test_ranges_overlap_is_inclusive():
    assert ranges_overlap(date(2024, 3, 1), date(2024, 3, 5), date(2024, 3, 5), date(2024, 3, 10))
    assert not ranges_overlap(date(2024, 3, 1), date(2024, 3, 4), date(2024, 3, 5), date(2024, 3, 10))


def test_working_days_between_skips_weekend():
    # Fri 2024-03-01 .. Fri 2024-03-08
    assert working_days_between(date(2024, 3, 1), date(2024, 3, 8)) == 6
    assert working_days_between(date(2024, 3, 2), date(2024, 3, 3)) == 0


def test_parse_iso_date():
    assert parse_iso_date("2024-03-04") == date(2024, 3, 4)
    with pytest.raises(ValueError):
        parse_iso_date("04/03/2024")


def test_day_validators():
    assert as_days(2.5) == as_days("2.5")
    assert require_positive_days(3) == 3
    with pytest.raises(ValidationError):
        require_positive_days(0)
    with pytest.raises(ValidationError):
        as_days(True)
    with pytest.raises(ValidationError):
        as_days("abc")


def test_require_int():
    assert require_int("7", "id") == 7
    with pytest.raises(ValidationError):
        require_int(None, "id")
    with pytest.raises(ValidationError):
        require_int("seven", "id")


def test_require_int_rejects_fractional_ids():
    assert require_int(3.0, "id") == 3
    with pytest.raises(ValidationError):
        require_int(1.9, "id")
    with pytest.raises(ValidationError):
        require_int("1.9", "id")
    with pytest.raises(ValidationError):
        require_int(float("nan"), "id")
