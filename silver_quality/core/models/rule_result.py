"""
RuleResult model representing the outcome of evaluating one rule.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .rule import RuleKind, Severity
from .violation import Violation


class RuleStatus(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    ERROR = "ERROR"


class RuleResult(BaseModel):
    """
    Outcome of evaluating a rule against its sources.

    Attributes:
        rule_id: Which rule was evaluated
        status: PASS, FAIL or ERROR
        violations: Violations in evaluation order (may be a sample)
        error_message: Data-access or evaluation failure, set only for ERROR
        severity: Copied from the rule for exit-code decisions
        kind: Copied from the rule for report readers
        violation_count: Total violations found, even when violations is sampled
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        json_schema_extra={
            "example": {
                "ruleId": "crm_sales_details.sales_consistency",
                "status": "FAIL",
                "violations": [
                    {
                        "ruleId": "crm_sales_details.sales_consistency",
                        "rowIdentifier": "SO43697",
                        "details": {"reasons": ["mismatch"]},
                    }
                ],
                "errorMessage": None,
                "severity": "ERROR",
                "kind": "ARITHMETIC_CONSISTENCY",
                "violationCount": 1,
            }
        },
    )

    rule_id: str
    status: RuleStatus
    violations: list[Violation] = Field(default_factory=list)
    error_message: str | None = None
    severity: Severity = Severity.ERROR
    kind: RuleKind | None = None
    violation_count: int = Field(0, ge=0)

    @field_validator("violations")
    @classmethod
    def check_violation_owner(cls, v, info):
        """Validate that every violation belongs to this rule."""
        rule_id = info.data.get("rule_id")
        for violation in v:
            if violation.rule_id != rule_id:
                raise ValueError(
                    f"violation for rule '{violation.rule_id}' attached to result of '{rule_id}'"
                )
        return v

    @model_validator(mode="after")
    def check_status_consistency(self):
        """Validate that error_message is set exactly for ERROR results."""
        if self.status == RuleStatus.ERROR and not self.error_message:
            raise ValueError("ERROR result requires error_message")
        if self.status != RuleStatus.ERROR and self.error_message:
            raise ValueError(f"{self.status.value} result cannot carry error_message")
        if self.violation_count < len(self.violations):
            raise ValueError("violation_count is smaller than the number of violations")
        return self

    @property
    def is_failure(self) -> bool:
        return self.status in (RuleStatus.FAIL, RuleStatus.ERROR)
