"""
Value coercion helpers shared by the checks.
"""

import math
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any


class UnparseableValue(ValueError):
    """Raised when a value cannot be coerced to the type a check needs."""


def is_blank(value: Any) -> bool:
    return isinstance(value, str) and value.strip() == ""


def parse_yyyymmdd(value: int | str) -> date:
    """
    Parse an integer-encoded date such as 20240131.

    Raises:
        UnparseableValue: If the value is not an 8-digit real calendar date
    """
    text = str(value).strip()
    if len(text) != 8 or not text.isdigit():
        raise UnparseableValue(f"{value!r} is not an 8-digit YYYYMMDD value")
    try:
        return date(int(text[:4]), int(text[4:6]), int(text[6:]))
    except ValueError as e:
        raise UnparseableValue(f"{value!r} is not a calendar date: {e}") from e


def to_date(value: Any) -> date | datetime:
    """
    Coerce a date-like value.

    Accepts date and datetime objects, ISO-8601 strings, and YYYYMMDD
    integers or digit strings. Datetimes are returned unchanged so that
    two timestamps keep their time component when compared.

    Raises:
        UnparseableValue: If the value is not date-like
    """
    if isinstance(value, datetime | date):
        return value
    if isinstance(value, bool):
        raise UnparseableValue(f"{value!r} is not a date")
    if isinstance(value, int):
        return parse_yyyymmdd(value)
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return parse_yyyymmdd(text)
        try:
            if "T" in text or " " in text:
                return datetime.fromisoformat(text)
            return date.fromisoformat(text)
        except ValueError as e:
            raise UnparseableValue(f"{value!r} is not an ISO date") from e
    raise UnparseableValue(f"{value!r} of type {type(value).__name__} is not a date")


def comparable_dates(left: date | datetime, right: date | datetime) -> tuple[date, date]:
    """Bring a date and a datetime to the same type before comparing."""
    if isinstance(left, datetime) and isinstance(right, datetime):
        if (left.tzinfo is None) != (right.tzinfo is None):
            return left.replace(tzinfo=None), right.replace(tzinfo=None)
        return left, right
    if isinstance(left, datetime):
        left = left.date()
    if isinstance(right, datetime):
        right = right.date()
    return left, right


def to_decimal(value: Any) -> Decimal:
    """
    Coerce a numeric value to Decimal without binary float artifacts.

    Raises:
        UnparseableValue: If the value is not numeric
    """
    if isinstance(value, bool):
        raise UnparseableValue(f"{value!r} is not numeric")
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise UnparseableValue(f"{value!r} is not a finite number")
        return value
    if isinstance(value, int | float | str):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise UnparseableValue(f"{value!r} is not numeric") from e
        if not result.is_finite():
            raise UnparseableValue(f"{value!r} is not a finite number")
        return result
    raise UnparseableValue(f"{value!r} of type {type(value).__name__} is not numeric")


def is_number(value: Any) -> bool:
    return isinstance(value, int | float | Decimal) and not isinstance(value, bool)


def is_finite_number(value: Any) -> bool:
    """True for numbers other than NaN and the infinities."""
    if not is_number(value):
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    return isinstance(value, int) or math.isfinite(value)
