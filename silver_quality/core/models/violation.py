"""
Violation model representing one row or group failing a rule.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Violation(BaseModel):
    """
    A single instance of a row or group failing a rule's predicate.

    Attributes:
        rule_id: Rule that produced the violation
        row_identifier: Key value, group key, or 1-based row ordinal
        details: Check-specific context (offending values, reason, counts)
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        json_schema_extra={
            "example": {
                "ruleId": "crm_cust_info.cst_id.unique",
                "rowIdentifier": 29466,
                "details": {"count": 3},
            }
        },
    )

    rule_id: str
    row_identifier: Any = None
    details: dict[str, Any] = Field(default_factory=dict)
