"""
Report aggregator collecting rule results from concurrent executors.
"""

import threading
import uuid
from collections.abc import Sequence

from silver_quality.core.models import OverallStatus, Report, Rule, RuleResult, RuleStatus
from silver_quality.observability.logger import get_logger

logger = get_logger(__name__)

NOT_COMPLETED = "rule did not complete"


class ReportAggregator:
    """
    Thread-safe collector turning per-rule results into a Report.

    Results are stored by rule id and emitted in registration order, so the
    report does not depend on completion order. Rules that never delivered
    a result are reported as ERROR.
    """

    def __init__(
        self,
        rules: Sequence[Rule],
        run_id: str | None = None,
        sample_limit: int | None = None,
    ):
        """
        Initialize aggregator.

        Args:
            rules: Expected rules, in registration order
            run_id: Run identifier (random UUID when None)
            sample_limit: Keep at most this many violations per result
        """
        rule_ids = [rule.id for rule in rules]
        if len(set(rule_ids)) != len(rule_ids):
            raise ValueError("rules contain duplicate ids")
        if sample_limit is not None and sample_limit < 0:
            raise ValueError("sample_limit cannot be negative")

        self.rule_ids = rule_ids
        self._rules = {rule.id: rule for rule in rules}
        self.run_id = run_id or str(uuid.uuid4())
        self.sample_limit = sample_limit
        self._results: dict[str, RuleResult] = {}
        self._fallback_errors: dict[str, str] = {}
        self._lock = threading.Lock()
        self._report: Report | None = None

    def add(self, result: RuleResult) -> None:
        """
        Record a finished rule.

        Raises:
            ValueError: If the rule is unknown or already recorded
            RuntimeError: If the report was already finalized
        """
        with self._lock:
            if self._report is not None:
                raise RuntimeError("Report already finalized")
            if result.rule_id not in self._rules:
                raise ValueError(f"Unexpected result for rule '{result.rule_id}'")
            if result.rule_id in self._results:
                raise ValueError(f"Result for rule '{result.rule_id}' already recorded")
            self._results[result.rule_id] = result

    def mark_incomplete(self, rule_id: str, message: str) -> None:
        """Set the error message used if the rule never reports a result."""
        with self._lock:
            self._fallback_errors[rule_id] = message

    @property
    def pending(self) -> list[str]:
        with self._lock:
            return [rule_id for rule_id in self.rule_ids if rule_id not in self._results]

    def _sampled(self, result: RuleResult) -> RuleResult:
        if self.sample_limit is None or len(result.violations) <= self.sample_limit:
            return result
        return result.model_copy(update={"violations": result.violations[:self.sample_limit]})

    def finalize(self) -> Report:
        """
        Build the Report. Calling again returns the same Report.

        Returns:
            Report with one result per expected rule
        """
        with self._lock:
            if self._report is not None:
                return self._report

            results = []
            for rule_id in self.rule_ids:
                result = self._results.get(rule_id)
                if result is None:
                    rule = self._rules[rule_id]
                    result = RuleResult(
                        rule_id=rule_id,
                        status=RuleStatus.ERROR,
                        error_message=self._fallback_errors.get(rule_id, NOT_COMPLETED),
                        severity=rule.severity,
                        kind=rule.kind,
                    )
                results.append(self._sampled(result))

            failed = any(r.status in (RuleStatus.FAIL, RuleStatus.ERROR) for r in results)
            self._report = Report(
                run_id=self.run_id,
                results=results,
                overall_status=OverallStatus.FAIL if failed else OverallStatus.PASS,
            )

        logger.info(
            f"Report finalized: {self._report.overall_status.value}",
            extra={"run_id": self.run_id, **self._report.summary},
        )
        return self._report
