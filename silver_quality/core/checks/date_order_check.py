"""
DateOrderCheck - a start date is mandatory and must not follow its end dates.
"""

from collections.abc import Mapping

from silver_quality.core.models import RuleKind, Violation
from silver_quality.sources.base import RowBatch

from .base_check import BaseCheck
from .values import UnparseableValue, comparable_dates, to_date


class DateOrderCheck(BaseCheck):
    """
    Reports rows whose end date precedes the start date.

    A null start date is a violation; a null end date is not (open-ended
    validity). Values may be dates, datetimes, ISO strings or YYYYMMDD
    integers.

    Parameters:
    - startField: Column holding the start date
    - endField / endFields: Column(s) that must not be earlier than the start
    """

    kind = RuleKind.DATE_ORDER

    def _configure(self) -> None:
        self.table = self._single_table()
        self.start_field = self._required_str("startField")
        self.end_fields = self._field_list("endField", "endFields")
        if self.start_field in self.end_fields:
            raise self._fail("startField cannot also be an end field")

    def required_columns(self) -> dict[str, list[str]]:
        return {self.table: self._with_id([self.start_field, *self.end_fields])}

    def evaluate(self, sources: Mapping[str, RowBatch]) -> list[Violation]:
        violations = []
        for ordinal, row in self._rows(sources, self.table):
            row_id = self._row_identifier(row, ordinal)
            raw_start = row.get(self.start_field)

            if raw_start is None:
                violations.append(self._violation(row_id, reason="missing_start", field=self.start_field))
                continue

            try:
                start = to_date(raw_start)
            except UnparseableValue as e:
                violations.append(
                    self._violation(row_id, reason="unparseable", field=self.start_field, error=str(e))
                )
                continue

            before_start = {}
            unparseable = {}
            for field in self.end_fields:
                raw_end = row.get(field)
                if raw_end is None:
                    continue
                try:
                    left, right = comparable_dates(to_date(raw_end), start)
                except UnparseableValue as e:
                    unparseable[field] = str(e)
                    continue
                if left < right:
                    before_start[field] = raw_end

            if unparseable:
                violations.append(self._violation(row_id, reason="unparseable", errors=unparseable))
            elif before_start:
                violations.append(
                    self._violation(
                        row_id,
                        reason="end_before_start",
                        start=raw_start,
                        ends=before_start,
                    )
                )
        return violations
