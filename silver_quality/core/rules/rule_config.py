"""
Rule configuration management.

Loads rule catalogs from YAML files and provides a builder for
assembling catalogs in code.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from silver_quality.core.models import Rule, RuleKind, Severity
from silver_quality.errors import InvalidRuleDefinition
from silver_quality.observability.logger import get_logger
from silver_quality.utils.validation import ValidationError, validate_rule_id

logger = get_logger(__name__)


def _describe(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ())) or "rule"
        parts.append(f"{location}: {item.get('msg')}")
    return "; ".join(parts)


def parse_rule(rule_def: Any, position: int | None = None) -> Rule:
    """
    Parse one rule definition into a Rule.

    Accepts camelCase or snake_case keys, and "table" as shorthand for a
    single-element targetTables.

    Raises:
        InvalidRuleDefinition: If the definition is malformed
    """
    where = f"rule #{position}" if position is not None else "rule"
    if not isinstance(rule_def, dict):
        raise InvalidRuleDefinition(None, f"{where} must be a mapping, got {type(rule_def).__name__}")

    rule_id = rule_def.get("id")
    if rule_id is None:
        raise InvalidRuleDefinition(None, f"{where} is missing 'id'")
    try:
        rule_id = validate_rule_id(rule_id)
    except ValidationError as e:
        raise InvalidRuleDefinition(str(rule_id), str(e)) from e

    data = dict(rule_def)
    data["id"] = rule_id

    if "table" in data:
        if "targetTables" in data or "target_tables" in data:
            raise InvalidRuleDefinition(rule_id, "use either 'table' or 'targetTables', not both")
        data["targetTables"] = [data.pop("table")]

    if "params" in data and "parameters" not in data:
        data["parameters"] = data.pop("params")

    try:
        return Rule.model_validate(data)
    except PydanticValidationError as e:
        raise InvalidRuleDefinition(rule_id, _describe(e)) from e


class RuleConfigLoader:
    """
    Loads rule catalogs from YAML configuration files.

    Expected YAML format:
    ```yaml
    rules:
      - id: crm_cust_info.cst_id.unique
        targetTables: [silver.crm_cust_info]
        kind: UNIQUE_KEY
        severity: ERROR
        parameters:
          keyFields: [cst_id]

      - id: crm_prd_info.prd_cost.range
        table: silver.crm_prd_info
        kind: RANGE
        parameters:
          field: prd_cost
          min: 0
    ```
    """

    def __init__(self, config_path: str | Path):
        """
        Initialize the rule config loader.

        Args:
            config_path: Path to the YAML configuration file
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Rule configuration file not found: {config_path}")

    def load_rules(self, include_disabled: bool = False) -> list[Rule]:
        """
        Load and parse rules from the YAML file.

        Args:
            include_disabled: Keep rules marked enabled: false

        Returns:
            Rules in file order

        Raises:
            InvalidRuleDefinition: If YAML is invalid or any rule is malformed
        """
        try:
            with open(self.config_path) as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidRuleDefinition(None, f"{self.config_path} is not valid YAML: {e}") from e

        if not isinstance(config, dict) or "rules" not in config:
            raise InvalidRuleDefinition(None, "Configuration file must contain 'rules' section")

        rule_defs = config["rules"]
        if not isinstance(rule_defs, list):
            raise InvalidRuleDefinition(None, "'rules' must be a list")

        rules = []
        for idx, rule_def in enumerate(rule_defs, start=1):
            rule = parse_rule(rule_def, idx)
            if not rule.enabled and not include_disabled:
                logger.info(f"Skipping disabled rule {rule.id}", extra={"rule_id": rule.id})
                continue
            rules.append(rule)

        logger.info(
            f"Loaded {len(rules)} rules from {self.config_path}",
            extra={"rules_path": str(self.config_path), "rule_count": len(rules)},
        )
        return rules


class RuleConfigBuilder:
    """
    Programmatically build rule catalogs (for testing or dynamic rules).
    """

    def __init__(self):
        self.rules: list[Rule] = []

    def add(
        self,
        rule_id: str,
        kind: RuleKind | str,
        tables: str | list[str],
        severity: Severity | str = Severity.ERROR,
        **parameters,
    ) -> "RuleConfigBuilder":
        """Add a rule of any kind."""
        if isinstance(tables, str):
            tables = [tables]
        self.rules.append(
            parse_rule({
                "id": rule_id,
                "targetTables": tables,
                "kind": kind.value if isinstance(kind, RuleKind) else kind,
                "severity": severity.value if isinstance(severity, Severity) else severity,
                "parameters": parameters,
            })
        )
        return self

    def add_unique_key(self, table: str, *key_fields: str, rule_id: str | None = None) -> "RuleConfigBuilder":
        rule_id = rule_id or f"{table}.{'_'.join(key_fields)}.unique"
        return self.add(rule_id, RuleKind.UNIQUE_KEY, table, keyFields=list(key_fields))

    def add_not_null(self, table: str, *fields: str, rule_id: str | None = None) -> "RuleConfigBuilder":
        rule_id = rule_id or f"{table}.{'_'.join(fields)}.not_null"
        return self.add(rule_id, RuleKind.NOT_NULL, table, fields=list(fields))

    def add_trimmed(self, table: str, *fields: str, rule_id: str | None = None) -> "RuleConfigBuilder":
        rule_id = rule_id or f"{table}.{'_'.join(fields)}.trimmed"
        return self.add(rule_id, RuleKind.NO_TRAILING_WHITESPACE, table, fields=list(fields))

    def add_allowed_values(
        self,
        table: str,
        field: str,
        values: list | None = None,
        rule_id: str | None = None,
        severity: Severity | str = Severity.WARNING,
    ) -> "RuleConfigBuilder":
        rule_id = rule_id or f"{table}.{field}.values"
        params: dict[str, Any] = {"field": field}
        if values is not None:
            params["values"] = values
        return self.add(rule_id, RuleKind.ALLOWED_VALUES, table, severity=severity, **params)

    def add_date_order(
        self, table: str, start_field: str, *end_fields: str, rule_id: str | None = None
    ) -> "RuleConfigBuilder":
        rule_id = rule_id or f"{table}.{start_field}.date_order"
        return self.add(
            rule_id, RuleKind.DATE_ORDER, table, startField=start_field, endFields=list(end_fields)
        )

    def add_reference(
        self,
        table: str,
        field: str,
        reference_table: str,
        reference_field: str,
        transform: list | None = None,
        rule_id: str | None = None,
    ) -> "RuleConfigBuilder":
        rule_id = rule_id or f"{table}.{field}.references"
        params: dict[str, Any] = {
            "table": table,
            "field": field,
            "referenceTable": reference_table,
            "referenceField": reference_field,
        }
        if transform:
            params["transform"] = transform
        return self.add(rule_id, RuleKind.CROSS_TABLE_REFERENCE, [table, reference_table], **params)

    def add_range(
        self,
        table: str,
        field: str,
        min_value: Any = None,
        max_value: Any = None,
        rule_id: str | None = None,
    ) -> "RuleConfigBuilder":
        rule_id = rule_id or f"{table}.{field}.range"
        params: dict[str, Any] = {"field": field}
        if min_value is not None:
            params["min"] = min_value
        if max_value is not None:
            params["max"] = max_value
        return self.add(rule_id, RuleKind.RANGE, table, **params)

    def build(self) -> list[Rule]:
        """Build and return the rule catalog."""
        return list(self.rules)
