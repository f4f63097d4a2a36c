"""
ArithmeticCheck - sales must equal quantity times price.
"""

from collections.abc import Mapping
from decimal import Decimal

from silver_quality.core.models import RuleKind, Violation
from silver_quality.sources.base import RowBatch

from .base_check import BaseCheck
from .values import UnparseableValue, to_decimal


class ArithmeticCheck(BaseCheck):
    """
    Reports rows where total != quantity * price, or any operand is null,
    non-numeric, zero or negative.

    Parameters:
    - totalField: default "sls_sales"
    - quantityField: default "sls_quantity"
    - priceField: default "sls_price"
    - tolerance: Allowed absolute difference (default: 0)
    """

    kind = RuleKind.ARITHMETIC_CONSISTENCY

    def _configure(self) -> None:
        self.table = self._single_table()
        self.total_field = self._required_str("totalField", "sls_sales")
        self.quantity_field = self._required_str("quantityField", "sls_quantity")
        self.price_field = self._required_str("priceField", "sls_price")
        fields = [self.total_field, self.quantity_field, self.price_field]
        if len(set(fields)) != 3:
            raise self._fail("totalField, quantityField and priceField must be distinct")

        try:
            self.tolerance = to_decimal(self.parameters.get("tolerance", 0))
        except UnparseableValue as e:
            raise self._fail(f"parameter 'tolerance' must be numeric: {e}") from e
        if self.tolerance < 0:
            raise self._fail("parameter 'tolerance' cannot be negative")

    @property
    def fields(self) -> list[str]:
        return [self.total_field, self.quantity_field, self.price_field]

    def required_columns(self) -> dict[str, list[str]]:
        return {self.table: self._with_id(self.fields)}

    def evaluate(self, sources: Mapping[str, RowBatch]) -> list[Violation]:
        violations = []
        for ordinal, row in self._rows(sources, self.table):
            reasons = []
            numbers: dict[str, Decimal] = {}

            for field in self.fields:
                value = row.get(field)
                if value is None:
                    reasons.append(f"null:{field}")
                    continue
                try:
                    number = to_decimal(value)
                except UnparseableValue:
                    reasons.append(f"non_numeric:{field}")
                    continue
                if number <= 0:
                    reasons.append(f"non_positive:{field}")
                numbers[field] = number

            if len(numbers) == 3:
                expected = numbers[self.quantity_field] * numbers[self.price_field]
                if abs(numbers[self.total_field] - expected) > self.tolerance:
                    reasons.append("mismatch")

            if reasons:
                violations.append(
                    self._violation(
                        self._row_identifier(row, ordinal),
                        reasons=reasons,
                        values={field: row.get(field) for field in self.fields},
                    )
                )
        return violations
