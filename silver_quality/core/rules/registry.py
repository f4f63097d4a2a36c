"""
Rule registry holding the fixed, read-only rule catalog of a process.
"""

from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
from typing import Any

from silver_quality.core.checks import BaseCheck, build_check
from silver_quality.core.models import Rule
from silver_quality.errors import InvalidRuleDefinition

from .rule_config import RuleConfigLoader


class RuleRegistry:
    """
    Ordered catalog of rules and their compiled checks.

    Every rule is compiled on registration, so a malformed catalog fails
    before anything runs. Registration order is the report order.
    """

    def __init__(self, rules: Iterable[Rule]):
        """
        Initialize the registry.

        Args:
            rules: Rules in registration order

        Raises:
            InvalidRuleDefinition: On duplicate ids or invalid parameters
        """
        self._rules: dict[str, Rule] = {}
        self._checks: dict[str, BaseCheck] = {}

        for rule in rules:
            if rule.id in self._rules:
                raise InvalidRuleDefinition(rule.id, "duplicate rule id")
            self._checks[rule.id] = build_check(rule)
            self._rules[rule.id] = rule

    @classmethod
    def from_file(cls, config_path: str | Path) -> "RuleRegistry":
        """Load and compile a YAML rule catalog."""
        return cls(RuleConfigLoader(config_path).load_rules())

    @property
    def rules(self) -> tuple[Rule, ...]:
        return tuple(self._rules.values())

    @property
    def rule_ids(self) -> list[str]:
        return list(self._rules)

    def get(self, rule_id: str) -> Rule:
        try:
            return self._rules[rule_id]
        except KeyError:
            raise KeyError(f"Unknown rule id: {rule_id}") from None

    def check_for(self, rule_id: str) -> BaseCheck:
        self.get(rule_id)
        return self._checks[rule_id]

    def tables(self) -> list[str]:
        """Return every target table, in first-registered order."""
        seen: dict[str, None] = {}
        for rule in self._rules.values():
            for table in rule.target_tables:
                seen.setdefault(table, None)
        return list(seen)

    def rules_for_table(self, table: str) -> list[Rule]:
        return [rule for rule in self._rules.values() if table in rule.target_tables]

    def by_table(self) -> dict[str, list[Rule]]:
        """Group rules by target table; cross-table rules appear under each table."""
        return {table: self.rules_for_table(table) for table in self.tables()}

    def select(
        self,
        rule_ids: Sequence[str] | None = None,
        tables: Sequence[str] | None = None,
    ) -> list[Rule]:
        """
        Select rules by id and/or target table, keeping registration order.

        Raises:
            InvalidRuleDefinition: If a requested rule id is not registered
        """
        if rule_ids:
            unknown = [rule_id for rule_id in rule_ids if rule_id not in self._rules]
            if unknown:
                raise InvalidRuleDefinition(None, f"Unknown rule id(s): {', '.join(unknown)}")

        selected = []
        for rule in self._rules.values():
            if rule_ids and rule.id not in rule_ids:
                continue
            if tables and not set(tables) & set(rule.target_tables):
                continue
            selected.append(rule)
        return selected

    def get_rule_summary(self) -> dict[str, Any]:
        """
        Get summary of loaded rules.

        Returns:
            Dictionary with rule counts by kind, severity and table
        """
        by_kind: dict[str, int] = {}
        by_severity: dict[str, int] = {}
        for rule in self._rules.values():
            by_kind[rule.kind.value] = by_kind.get(rule.kind.value, 0) + 1
            by_severity[rule.severity.value] = by_severity.get(rule.severity.value, 0) + 1
        return {
            "total_rules": len(self._rules),
            "rules_by_kind": by_kind,
            "rules_by_severity": by_severity,
            "rules_by_table": {table: len(rules) for table, rules in self.by_table().items()},
        }

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules.values())

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules
