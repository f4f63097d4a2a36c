"""
IntegerDateCheck - YYYYMMDD integer columns must hold real, plausible dates.
"""

from collections.abc import Mapping
from decimal import Decimal

from silver_quality.core.models import RuleKind, Violation
from silver_quality.sources.base import RowBatch

from .base_check import BaseCheck
from .values import UnparseableValue, parse_yyyymmdd


class IntegerDateCheck(BaseCheck):
    """
    Validates dates stored as YYYYMMDD integers before they are cast.

    Violations: null (unless allowNull), zero or negative, not exactly
    8 digits, not a calendar date, or outside [min, max].

    Parameters:
    - field: Column to inspect
    - min: Lowest accepted YYYYMMDD value (optional)
    - max: Highest accepted YYYYMMDD value (optional)
    - allowNull: Null is not a violation (default: False)
    """

    kind = RuleKind.INTEGER_DATE

    def _configure(self) -> None:
        self.table = self._single_table()
        self.field = self._required_str("field")
        self.allow_null = bool(self.parameters.get("allowNull", False))
        self.min_value = self._bound("min")
        self.max_value = self._bound("max")
        if self.min_value is not None and self.max_value is not None and self.min_value > self.max_value:
            raise self._fail(f"min {self.min_value} is greater than max {self.max_value}")

    def _bound(self, name: str) -> int | None:
        value = self.parameters.get(name)
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int):
            raise self._fail(f"parameter '{name}' must be a YYYYMMDD integer")
        try:
            parse_yyyymmdd(value)
        except UnparseableValue as e:
            raise self._fail(f"parameter '{name}': {e}") from e
        return value

    def required_columns(self) -> dict[str, list[str]]:
        return {self.table: self._with_id([self.field])}

    def _reason(self, value) -> str | None:
        if value is None:
            return None if self.allow_null else "null"
        if isinstance(value, bool):
            return "non_numeric"
        if isinstance(value, str):
            text = value.strip()
            if not text.lstrip("-").isdigit():
                return "non_numeric"
            value = int(text)
        if not isinstance(value, int):
            if isinstance(value, float) and value.is_integer():
                value = int(value)
            elif isinstance(value, Decimal) and value.is_finite() and value == value.to_integral_value():
                value = int(value)
            else:
                return "non_numeric"
        if value <= 0:
            return "non_positive"
        if len(str(value)) != 8:
            return "bad_length"
        try:
            parse_yyyymmdd(value)
        except UnparseableValue:
            return "invalid_date"
        if self.min_value is not None and value < self.min_value:
            return "below_min"
        if self.max_value is not None and value > self.max_value:
            return "above_max"
        return None

    def evaluate(self, sources: Mapping[str, RowBatch]) -> list[Violation]:
        violations = []
        for ordinal, row in self._rows(sources, self.table):
            value = row.get(self.field)
            reason = self._reason(value)
            if reason:
                violations.append(
                    self._violation(self._row_identifier(row, ordinal), reason=reason, value=value)
                )
        return violations
