"""
UniqueKeyCheck - primary keys must be unique and not null.
"""

from collections.abc import Mapping

from silver_quality.core.models import RuleKind, Violation
from silver_quality.sources.base import RowBatch

from .base_check import BaseCheck


class UniqueKeyCheck(BaseCheck):
    """
    Groups rows by key and reports duplicate groups and null keys.

    Parameters:
    - keyFields: Key columns (or keyField for a single column)

    One violation per duplicated key group (row identifier is the key) and
    one per row whose key has a null component (row identifier is the
    ordinal, or idField when configured).
    """

    kind = RuleKind.UNIQUE_KEY

    def _configure(self) -> None:
        self.table = self._single_table()
        self.key_fields = self._field_list("keyField", "keyFields")

    def required_columns(self) -> dict[str, list[str]]:
        return {self.table: self._with_id(self.key_fields)}

    def _key_value(self, key: tuple):
        return key[0] if len(key) == 1 else key

    def evaluate(self, sources: Mapping[str, RowBatch]) -> list[Violation]:
        # position of first appearance keeps output in input order
        groups: dict[tuple, list[int]] = {}
        null_rows: list[tuple[int, Violation]] = []

        for ordinal, row in self._rows(sources, self.table):
            key = tuple(row.get(field) for field in self.key_fields)
            if any(part is None for part in key):
                null_rows.append((
                    ordinal,
                    self._violation(
                        self._row_identifier(row, ordinal),
                        reason="null_key",
                        key=dict(zip(self.key_fields, key)),
                    ),
                ))
                continue
            groups.setdefault(key, []).append(ordinal)

        positioned = list(null_rows)
        for key, ordinals in groups.items():
            if len(ordinals) > 1:
                positioned.append((
                    ordinals[0],
                    self._violation(
                        self._key_value(key),
                        reason="duplicate_key",
                        count=len(ordinals),
                        rows=ordinals,
                    ),
                ))

        positioned.sort(key=lambda item: item[0])
        return [violation for _, violation in positioned]
