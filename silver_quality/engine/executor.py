"""
Rule executor: fetch sources, evaluate one rule, capture failures.
"""

import time

from silver_quality.core.checks import BaseCheck, build_check
from silver_quality.core.models import Rule, RuleResult, RuleStatus
from silver_quality.errors import DataQualityError, SchemaMismatch, SourceUnavailable
from silver_quality.observability import metrics
from silver_quality.observability.logger import get_logger
from silver_quality.sources.base import RowBatch, RowSourceAdapter

logger = get_logger(__name__)


class RuleExecutor:
    """
    Runs a single rule against a row source.

    Data-access failures never propagate: they become ERROR results so
    that one unreachable table cannot abort the run.
    """

    def run(self, rule: Rule, adapter: RowSourceAdapter, check: BaseCheck | None = None) -> RuleResult:
        """
        Execute a rule.

        Args:
            rule: Rule to run
            adapter: Row source serving the rule's target tables
            check: Pre-built check for the rule (built on demand when None)

        Returns:
            RuleResult with status PASS, FAIL or ERROR
        """
        check = check or build_check(rule)
        log_context = {"rule_id": rule.id, "kind": rule.kind.value, "tables": rule.target_tables}
        logger.debug(f"Running rule {rule.id}", extra=log_context)

        start = time.perf_counter()
        try:
            batches: dict[str, RowBatch] = {}
            for table, columns in check.required_columns().items():
                batches[table] = adapter.fetch(table, columns)
            violations = check.evaluate(batches)

        except (SourceUnavailable, SchemaMismatch) as e:
            metrics.record_fetch_error(e.table, type(e).__name__)
            return self._error(rule, e, start, log_context)

        except DataQualityError as e:
            return self._error(rule, e, start, log_context)

        except Exception as e:
            logger.error(
                f"Rule {rule.id} raised an unexpected error: {e}",
                extra=log_context,
                exc_info=True,
            )
            return self._error(rule, e, start, log_context, unexpected=True)

        duration = time.perf_counter() - start
        if check.descriptive or not violations:
            status = RuleStatus.PASS
        else:
            status = RuleStatus.FAIL

        result = RuleResult(
            rule_id=rule.id,
            status=status,
            violations=violations,
            severity=rule.severity,
            kind=rule.kind,
            violation_count=len(violations),
        )
        metrics.record_rule_result(
            rule.kind.value, status.value, rule.id, rule.severity.value, len(violations), duration
        )

        log = logger.warning if status == RuleStatus.FAIL else logger.info
        log(
            f"Rule {rule.id}: {status.value} ({len(violations)} violation(s))",
            extra={**log_context, "status": status.value, "violation_count": len(violations),
                   "duration_seconds": round(duration, 3)},
        )
        return result

    def _error(
        self,
        rule: Rule,
        error: Exception,
        start: float,
        log_context: dict,
        unexpected: bool = False,
    ) -> RuleResult:
        duration = time.perf_counter() - start
        error_type = type(error).__name__
        message = f"{error_type}: {error}" if unexpected else (str(error) or error_type)

        metrics.record_rule_result(
            rule.kind.value, RuleStatus.ERROR.value, rule.id, rule.severity.value, 0, duration
        )
        if not unexpected:
            logger.error(
                f"Rule {rule.id}: ERROR ({message})",
                extra={**log_context, "status": "ERROR", "error_type": error_type},
            )

        return RuleResult(
            rule_id=rule.id,
            status=RuleStatus.ERROR,
            error_message=message,
            severity=rule.severity,
            kind=rule.kind,
        )
