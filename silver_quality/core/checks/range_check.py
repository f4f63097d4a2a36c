"""
RangeCheck - values must fall within inclusive bounds.
"""

from collections.abc import Mapping
from datetime import date
from typing import Any

from silver_quality.core.models import RuleKind, Violation
from silver_quality.sources.base import RowBatch

from .base_check import BaseCheck
from .values import UnparseableValue, comparable_dates, is_finite_number, is_number, to_date

TODAY = "today"


class RangeCheck(BaseCheck):
    """
    Reports values outside [min, max]. Null is out of range.

    Bounds are numbers or dates. Date bounds may be ISO strings or the
    token "today", resolved when evaluation starts.

    Parameters:
    - field: Column to inspect
    - min: Lower bound, inclusive (optional)
    - max: Upper bound, inclusive (optional)
    """

    kind = RuleKind.RANGE

    def _configure(self) -> None:
        self.table = self._single_table()
        self.field = self._required_str("field")
        self.min_spec = self.parameters.get("min")
        self.max_spec = self.parameters.get("max")

        if self.min_spec is None and self.max_spec is None:
            raise self._fail("RANGE requires at least one of: min, max")

        kinds = {self._bound_kind(name, spec) for name, spec in
                 (("min", self.min_spec), ("max", self.max_spec)) if spec is not None}
        if len(kinds) > 1:
            raise self._fail("min and max must both be numbers or both be dates")
        self.date_bounds = kinds == {"date"}

        if self.min_spec is not None and self.max_spec is not None and TODAY not in (self.min_spec, self.max_spec):
            low, high = self._resolve(self.min_spec), self._resolve(self.max_spec)
            if self.date_bounds:
                low, high = comparable_dates(low, high)
            if low > high:
                raise self._fail(f"min {self.min_spec!r} is greater than max {self.max_spec!r}")

    def _bound_kind(self, name: str, spec: Any) -> str:
        if is_number(spec):
            if not is_finite_number(spec):
                raise self._fail(f"parameter '{name}' must be a finite number")
            return "number"
        if spec == TODAY:
            return "date"
        if isinstance(spec, str | date):
            try:
                to_date(spec)
            except UnparseableValue as e:
                raise self._fail(f"parameter '{name}' is not a number or date: {e}") from e
            return "date"
        raise self._fail(f"parameter '{name}' is not a number or date")

    @staticmethod
    def _resolve(spec: Any) -> Any:
        if spec is None:
            return None
        if spec == TODAY:
            return date.today()
        if is_number(spec):
            return spec
        return to_date(spec)

    def required_columns(self) -> dict[str, list[str]]:
        return {self.table: self._with_id([self.field])}

    def _coerce(self, value: Any) -> Any:
        if self.date_bounds:
            return to_date(value)
        if is_finite_number(value):
            return value
        if is_number(value):
            raise UnparseableValue(f"{value!r} is not a finite number")
        raise UnparseableValue(f"{value!r} is not numeric")

    def _outside(self, value: Any, low: Any, high: Any) -> str | None:
        if low is not None:
            left, right = comparable_dates(value, low) if self.date_bounds else (value, low)
            if left < right:
                return "below_min"
        if high is not None:
            left, right = comparable_dates(value, high) if self.date_bounds else (value, high)
            if left > right:
                return "above_max"
        return None

    def evaluate(self, sources: Mapping[str, RowBatch]) -> list[Violation]:
        low = self._resolve(self.min_spec)
        high = self._resolve(self.max_spec)

        violations = []
        for ordinal, row in self._rows(sources, self.table):
            raw = row.get(self.field)
            row_id = self._row_identifier(row, ordinal)
            if raw is None:
                violations.append(self._violation(row_id, reason="null", value=None))
                continue

            try:
                value = self._coerce(raw)
            except UnparseableValue as e:
                violations.append(self._violation(row_id, reason="not_comparable", value=raw, error=str(e)))
                continue

            reason = self._outside(value, low, high)
            if reason:
                violations.append(
                    self._violation(row_id, reason=reason, value=raw, min=low, max=high)
                )
        return violations
