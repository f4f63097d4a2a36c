"""
Rule model representing a named data-quality check bound to one or more tables.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class RuleKind(str, Enum):
    """Fixed catalog of check semantics."""

    UNIQUE_KEY = "UNIQUE_KEY"
    NOT_NULL = "NOT_NULL"
    NO_TRAILING_WHITESPACE = "NO_TRAILING_WHITESPACE"
    ALLOWED_VALUES = "ALLOWED_VALUES"
    DATE_ORDER = "DATE_ORDER"
    CROSS_TABLE_REFERENCE = "CROSS_TABLE_REFERENCE"
    ARITHMETIC_CONSISTENCY = "ARITHMETIC_CONSISTENCY"
    RANGE = "RANGE"
    INTEGER_DATE = "INTEGER_DATE"


class Severity(str, Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"


class Rule(BaseModel):
    """
    A single named check bound to one or more tables.

    Attributes:
        id: Unique rule identifier ("crm_cust_info.cst_id.unique")
        target_tables: Tables the check reads, in fetch order
        kind: Check semantics (see RuleKind)
        parameters: Kind-specific parameters (e.g. {"keyFields": ["cst_id"]})
        severity: ERROR or WARNING
        enabled: Whether the rule is loaded into the registry
        description: Free-text explanation for report readers
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        use_enum_values=False,
        json_schema_extra={
            "example": {
                "id": "crm_cust_info.cst_id.unique",
                "targetTables": ["silver.crm_cust_info"],
                "kind": "UNIQUE_KEY",
                "parameters": {"keyFields": ["cst_id"]},
                "severity": "ERROR",
            }
        },
    )

    id: str = Field(..., min_length=1)
    target_tables: list[str] = Field(..., min_length=1)
    kind: RuleKind
    parameters: dict[str, Any] = Field(default_factory=dict)
    severity: Severity = Severity.ERROR
    enabled: bool = True
    description: str | None = None

    @field_validator("kind", "severity", mode="before")
    @classmethod
    def normalize_enum_case(cls, v):
        """Accept lower-case enum names from rule files."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("target_tables")
    @classmethod
    def check_unique_tables(cls, v):
        """Validate that target tables are non-empty and not repeated."""
        seen = set()
        for table in v:
            if not table or not table.strip():
                raise ValueError("target table names must be non-empty")
            if table in seen:
                raise ValueError(f"target table '{table}' listed more than once")
            seen.add(table)
        return v
