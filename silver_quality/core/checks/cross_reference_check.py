"""
CrossReferenceCheck - foreign keys must resolve in the referenced table.
"""

from collections.abc import Mapping

from silver_quality.core.models import RuleKind, Violation
from silver_quality.sources.base import RowBatch

from .base_check import BaseCheck
from .transforms import apply_transforms, build_transforms


class CrossReferenceCheck(BaseCheck):
    """
    Reports rows whose normalized key is absent from a referenced table.

    Parameters:
    - table: Referencing table (default: first target table)
    - field: Foreign-key column in table
    - referenceTable: Referenced table (default: second target table)
    - referenceField: Key column in referenceTable
    - transform: Transforms applied to the foreign key before lookup
    - allowNull: Null foreign keys are not violations (default: False)
    - compareAsString: Compare str() of both sides (default: False)
    """

    kind = RuleKind.CROSS_TABLE_REFERENCE

    def _configure(self) -> None:
        self.table = self._table_param("table", 0)
        self.reference_table = self._table_param("referenceTable", 1)
        self.field = self._required_str("field")
        self.reference_field = self._required_str("referenceField")
        self.transforms = build_transforms(self.rule.id, self.parameters.get("transform"))
        self.allow_null = bool(self.parameters.get("allowNull", False))
        self.compare_as_string = bool(self.parameters.get("compareAsString", False))
        if self.table == self.reference_table and self.field == self.reference_field:
            raise self._fail("a column cannot reference itself")

    def required_columns(self) -> dict[str, list[str]]:
        if self.table == self.reference_table:
            return {self.table: self._with_id([self.field, self.reference_field])}
        return {
            self.table: self._with_id([self.field]),
            self.reference_table: [self.reference_field],
        }

    def _key(self, value):
        if self.compare_as_string and value is not None:
            return str(value)
        return value

    def evaluate(self, sources: Mapping[str, RowBatch]) -> list[Violation]:
        if self.table == self.reference_table:
            rows = list(self._batch(sources, self.table))
            reference_rows = rows
        else:
            reference_rows = self._batch(sources, self.reference_table)
            rows = None

        keys = {
            self._key(row.get(self.reference_field))
            for row in reference_rows
            if row.get(self.reference_field) is not None
        }

        iterator = enumerate(rows, start=1) if rows is not None else self._rows(sources, self.table)
        violations = []
        for ordinal, row in iterator:
            raw = row.get(self.field)
            if raw is None:
                if not self.allow_null:
                    violations.append(
                        self._violation(self._row_identifier(row, ordinal), reason="null_key", value=None)
                    )
                continue

            normalized = apply_transforms(self.transforms, raw)
            if self._key(normalized) not in keys:
                violations.append(
                    self._violation(
                        self._row_identifier(row, ordinal),
                        reason="missing_reference",
                        value=raw,
                        normalized=normalized,
                        reference_table=self.reference_table,
                    )
                )
        return violations
