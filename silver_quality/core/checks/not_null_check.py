"""
NotNullCheck - mandatory columns must hold a value.
"""

from collections.abc import Mapping

from silver_quality.core.models import RuleKind, Violation
from silver_quality.sources.base import RowBatch

from .base_check import BaseCheck
from .values import is_blank


class NotNullCheck(BaseCheck):
    """
    Reports rows with a null in any of the configured columns.

    Parameters:
    - field / fields: Columns that must not be null
    - treatBlankAsNull: Also report whitespace-only strings (default: False)
    """

    kind = RuleKind.NOT_NULL

    def _configure(self) -> None:
        self.table = self._single_table()
        self.fields = self._field_list("field", "fields")
        self.treat_blank_as_null = bool(self.parameters.get("treatBlankAsNull", False))

    def required_columns(self) -> dict[str, list[str]]:
        return {self.table: self._with_id(self.fields)}

    def _is_null(self, value) -> bool:
        return value is None or (self.treat_blank_as_null and is_blank(value))

    def evaluate(self, sources: Mapping[str, RowBatch]) -> list[Violation]:
        violations = []
        for ordinal, row in self._rows(sources, self.table):
            null_fields = [field for field in self.fields if self._is_null(row.get(field))]
            if null_fields:
                violations.append(
                    self._violation(self._row_identifier(row, ordinal), null_fields=null_fields)
                )
        return violations
