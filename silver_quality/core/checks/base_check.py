"""
Base check interface for all rule kinds.

A check is the executable form of a Rule. Checks validate their
parameters on construction and evaluate as pure functions of the row
batches they are given.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any

from silver_quality.core.models import Rule, RuleKind, Violation
from silver_quality.errors import InvalidRuleDefinition
from silver_quality.sources.base import Row, RowBatch

_MISSING = object()


class BaseCheck(ABC):
    """
    Abstract base class for all checks.

    Subclasses declare their kind, parse parameters in _configure(), list
    the columns they read per table, and implement evaluate().
    """

    kind: RuleKind

    def __init__(self, rule: Rule):
        """
        Initialize check.

        Args:
            rule: Rule definition this check executes

        Raises:
            InvalidRuleDefinition: If parameters do not satisfy the kind
        """
        if rule.kind != self.kind:
            raise InvalidRuleDefinition(
                rule.id, f"{self.__class__.__name__} cannot run {rule.kind.value} rules"
            )
        self.rule = rule
        self.parameters = rule.parameters
        self.id_field: str | None = self._optional_str("idField")
        self._configure()

    @property
    def rule_id(self) -> str:
        return self.rule.id

    @property
    def descriptive(self) -> bool:
        """True when violations are informational and never fail the rule."""
        return False

    @abstractmethod
    def _configure(self) -> None:
        """Parse and validate kind-specific parameters."""
        pass

    @abstractmethod
    def required_columns(self) -> dict[str, list[str]]:
        """Return the columns to fetch for each target table."""
        pass

    @abstractmethod
    def evaluate(self, sources: Mapping[str, RowBatch]) -> list[Violation]:
        """
        Evaluate the rule.

        Args:
            sources: Row batch per target table

        Returns:
            Violations in deterministic order
        """
        pass

    # -----------------------
    # parameter helpers
    # -----------------------

    def _fail(self, message: str) -> InvalidRuleDefinition:
        return InvalidRuleDefinition(self.rule.id, message)

    def _required(self, name: str) -> Any:
        value = self.parameters.get(name, _MISSING)
        if value is _MISSING or value is None:
            raise self._fail(f"{self.kind.value} requires parameter '{name}'")
        return value

    def _optional_str(self, name: str, default: str | None = None) -> str | None:
        value = self.parameters.get(name, default)
        if value is not None and (not isinstance(value, str) or not value.strip()):
            raise self._fail(f"parameter '{name}' must be a non-empty string")
        return value

    def _required_str(self, name: str, default: str | None = None) -> str:
        value = self._optional_str(name, default)
        if value is None:
            raise self._fail(f"{self.kind.value} requires parameter '{name}'")
        return value

    def _field_list(self, single: str, plural: str) -> list[str]:
        """Read a "field"/"fields" style parameter pair into a list."""
        if plural in self.parameters:
            values = self.parameters[plural]
            if isinstance(values, str):
                values = [values]
            if not isinstance(values, list) or not values:
                raise self._fail(f"parameter '{plural}' must be a non-empty list")
            for value in values:
                if not isinstance(value, str) or not value.strip():
                    raise self._fail(f"parameter '{plural}' must contain column names")
            if len(set(values)) != len(values):
                raise self._fail(f"parameter '{plural}' repeats a column")
            return list(values)
        if single in self.parameters:
            return [self._required_str(single)]
        raise self._fail(f"{self.kind.value} requires parameter '{single}' or '{plural}'")

    def _table_param(self, name: str, position: int) -> str:
        """Resolve a table parameter, defaulting to a target table by position."""
        default = None
        if position < len(self.rule.target_tables):
            default = self.rule.target_tables[position]
        table = self._optional_str(name, default)
        if table is None:
            raise self._fail(f"{self.kind.value} requires parameter '{name}'")
        if table not in self.rule.target_tables:
            raise self._fail(f"table '{table}' is not listed in targetTables")
        return table

    def _single_table(self) -> str:
        return self._table_param("table", 0)

    def _with_id(self, columns: Iterable[str]) -> list[str]:
        result = list(dict.fromkeys(columns))
        if self.id_field and self.id_field not in result:
            result.append(self.id_field)
        return result

    # -----------------------
    # evaluation helpers
    # -----------------------

    def _batch(self, sources: Mapping[str, RowBatch], table: str) -> RowBatch:
        try:
            return sources[table]
        except KeyError:
            raise KeyError(f"no row batch supplied for table '{table}'") from None

    def _rows(self, sources: Mapping[str, RowBatch], table: str) -> Iterable[tuple[int, Row]]:
        """Yield (1-based ordinal, row) pairs."""
        return enumerate(self._batch(sources, table), start=1)

    def _row_identifier(self, row: Row, ordinal: int) -> Any:
        if self.id_field:
            return row.get(self.id_field)
        return ordinal

    def _violation(self, row_identifier: Any, **details) -> Violation:
        return Violation(rule_id=self.rule.id, row_identifier=row_identifier, details=details)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(rule={self.rule.id}, params={self.parameters})"
