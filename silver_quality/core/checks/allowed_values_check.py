"""
AllowedValuesCheck - low-cardinality columns must use a known code set.
"""

from collections.abc import Mapping
from typing import Any

from silver_quality.core.models import RuleKind, Violation
from silver_quality.sources.base import RowBatch

from .base_check import BaseCheck
from .transforms import apply_transforms, build_transforms


class AllowedValuesCheck(BaseCheck):
    """
    Reports distinct observed values outside an allow-list.

    Without an allow-list the check is descriptive: it returns one entry
    per distinct value, with its row count, for human review, and the rule
    never fails.

    Parameters:
    - field: Column to inspect
    - values: Allowed values (optional)
    - normalize: Transforms applied to observed values before lookup
    """

    kind = RuleKind.ALLOWED_VALUES

    def _configure(self) -> None:
        self.table = self._single_table()
        self.field = self._required_str("field")
        self.normalize = build_transforms(self.rule.id, self.parameters.get("normalize"))

        values = self.parameters.get("values")
        if values is not None:
            if not isinstance(values, list):
                raise self._fail("parameter 'values' must be a list")
            try:
                values = frozenset(values)
            except TypeError as e:
                raise self._fail(f"parameter 'values' must hold scalar values: {e}") from e
        self.allowed: frozenset | None = values

    @property
    def descriptive(self) -> bool:
        return self.allowed is None

    def required_columns(self) -> dict[str, list[str]]:
        return {self.table: [self.field]}

    def evaluate(self, sources: Mapping[str, RowBatch]) -> list[Violation]:
        counts: dict[Any, int] = {}
        for _, row in self._rows(sources, self.table):
            value = apply_transforms(self.normalize, row.get(self.field))
            counts[value] = counts.get(value, 0) + 1

        if self.allowed is None:
            return [
                self._violation(value, count=count, descriptive=True)
                for value, count in counts.items()
            ]

        return [
            self._violation(value, count=count)
            for value, count in counts.items()
            if value not in self.allowed
        ]
