from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; a trailing 'Z' is accepted."""
    v = value.strip()
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    return datetime.fromisoformat(v)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def to_local_naive(moment: datetime) -> datetime:
    """Aware timestamps are converted to naive local time; naive ones pass through."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


def parse_hhmm(value: object) -> Optional[time]:
    """Parse 'HH:MM' (or 'H:MM', optional ':SS'); None when malformed."""
    if not isinstance(value, str):
        return None
    parts = value.strip().split(":")
    if len(parts) < 2 or len(parts) > 3:
        return None
    try:
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2]) if len(parts) == 3 else 0
        return time(hour=hours, minute=minutes, second=seconds)
    except ValueError:
        return None


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, rounded half up (may be negative)."""
    seconds = Decimal(str((end - start).total_seconds()))
    return int((seconds / 60).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    # Inclusive on both ends: touching ranges share the boundary day.
    return start_a <= end_b and start_b <= end_a


def working_days_between(start: date, end: date) -> int:
    """Count Monday-Friday days in [start, end]."""
    count = 0
    current = start
    while current <= end:
        if current.weekday() < 5:
            count += 1
        current += timedelta(days=1)
    return count
