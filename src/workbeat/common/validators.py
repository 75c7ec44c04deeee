from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation

from ..core.exceptions import ValidationError


def as_days(value: object, field_name: str = "days") -> Decimal:
    """Coerce int/float/str/Decimal into Decimal days."""
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        return value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")


def require_positive_days(value: object, field_name: str = "days") -> Decimal:
    days = as_days(value, field_name)
    if not days.is_finite() or days <= 0:
        raise ValidationError(f"{field_name} must be greater than 0")
    return days


def require_non_negative_days(value: object, field_name: str) -> Decimal:
    days = as_days(value, field_name)
    if not days.is_finite() or days < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return days


def require_date_range(start: date, end: date) -> None:
    if end < start:
        raise ValidationError("End date must be on or after start date")


def require_int(value: object, field_name: str) -> int:
    if value is None or isinstance(value, bool) or value == "":
        raise ValidationError(f"{field_name} is required")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"{field_name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
