"""
Report model collecting every rule result of one run.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from .rule_result import RuleResult, RuleStatus


class OverallStatus(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Report(BaseModel):
    """
    Structured outcome of a run (immutable once built).

    Attributes:
        run_id: Unique identifier of the run
        timestamp: When the report was finalized (UTC)
        results: One RuleResult per registered rule, in registration order
        overall_status: FAIL if any result is FAIL or ERROR, otherwise PASS
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    run_id: str = Field(..., min_length=1)
    timestamp: datetime = Field(default_factory=_utcnow)
    results: list[RuleResult] = Field(default_factory=list)
    overall_status: OverallStatus

    @computed_field
    @property
    def summary(self) -> dict[str, int]:
        counts = {status.value.lower(): 0 for status in RuleStatus}
        for result in self.results:
            counts[result.status.value.lower()] += 1
        counts["totalRules"] = len(self.results)
        counts["totalViolations"] = sum(
            r.violation_count for r in self.results if r.status == RuleStatus.FAIL
        )
        return counts

    def result_for(self, rule_id: str) -> RuleResult | None:
        for result in self.results:
            if result.rule_id == rule_id:
                return result
        return None

    def failed_results(self) -> list[RuleResult]:
        return [r for r in self.results if r.is_failure]

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the external camelCase field names."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, default=str)
