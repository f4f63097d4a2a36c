"""
WhitespaceCheck - string columns must not carry leading or trailing spaces.
"""

from collections.abc import Mapping

from silver_quality.core.models import RuleKind, Violation
from silver_quality.sources.base import RowBatch

from .base_check import BaseCheck


class WhitespaceCheck(BaseCheck):
    """
    Reports rows where value != value.strip() for any configured column.

    Internal whitespace is allowed. Nulls and non-string values are
    skipped.

    Parameters:
    - field / fields: Columns to inspect
    """

    kind = RuleKind.NO_TRAILING_WHITESPACE

    def _configure(self) -> None:
        self.table = self._single_table()
        self.fields = self._field_list("field", "fields")

    def required_columns(self) -> dict[str, list[str]]:
        return {self.table: self._with_id(self.fields)}

    def evaluate(self, sources: Mapping[str, RowBatch]) -> list[Violation]:
        violations = []
        for ordinal, row in self._rows(sources, self.table):
            untrimmed = {}
            for field in self.fields:
                value = row.get(field)
                if isinstance(value, str) and value != value.strip():
                    untrimmed[field] = value
            if untrimmed:
                violations.append(
                    self._violation(self._row_identifier(row, ordinal), values=untrimmed)
                )
        return violations
