"""
Run controller: schedule rules on a bounded worker pool and build the report.

Flow: select rules → queue one task per rule → daemon workers run the
executor and hand each result to the aggregator → wait (optionally with a
run-level timeout) → finalize the report.
"""

import threading
import time
import uuid
from collections.abc import Sequence
from queue import Empty, Queue

from silver_quality.core.models import Report, Rule
from silver_quality.core.rules import RuleRegistry
from silver_quality.errors import RunTimeout
from silver_quality.observability import metrics
from silver_quality.observability.logger import get_logger, log_operation
from silver_quality.sources.base import RowSourceAdapter
from silver_quality.utils.validation import validate_positive_int, validate_timeout

from .aggregator import ReportAggregator
from .executor import RuleExecutor

logger = get_logger(__name__)


class RunController:
    """
    Orchestrates a data-quality run.

    Rules are independent and read-only, so any two may run concurrently,
    including rules on the same table. Failed rules are reported, never
    retried.
    """

    def __init__(
        self,
        concurrency: int = 4,
        timeout_seconds: float | None = None,
        sample_limit: int | None = None,
        executor: RuleExecutor | None = None,
    ):
        """
        Initialize run controller.

        Args:
            concurrency: Maximum rules evaluated at once
            timeout_seconds: Run-level timeout (no limit when None)
            sample_limit: Violations kept per result in the report
            executor: Rule executor (default RuleExecutor())
        """
        self.concurrency = validate_positive_int(concurrency, "concurrency", max_value=256)
        self.timeout_seconds = validate_timeout(timeout_seconds)
        self.sample_limit = sample_limit
        self.executor = executor or RuleExecutor()

    def run_all(
        self,
        registry: RuleRegistry,
        adapter: RowSourceAdapter,
        rule_ids: Sequence[str] | None = None,
        tables: Sequence[str] | None = None,
        run_id: str | None = None,
    ) -> Report:
        """
        Run the selected rules and return the finalized report.

        Args:
            registry: Rule catalog
            adapter: Row source for every target table
            rule_ids: Only run these rules (all when None)
            tables: Only run rules touching these tables (all when None)
            run_id: Run identifier (random UUID when None)

        Returns:
            Report with exactly one result per selected rule

        Raises:
            InvalidRuleDefinition: If rule_ids names an unregistered rule
        """
        rules = registry.select(rule_ids=rule_ids, tables=tables)
        run_id = run_id or str(uuid.uuid4())
        aggregator = ReportAggregator(rules, run_id=run_id, sample_limit=self.sample_limit)

        with log_operation(
            "Data-quality run",
            logger=logger,
            run_id=run_id,
            rule_count=len(rules),
            concurrency=self.concurrency,
            source=adapter.name,
        ):
            if rules:
                try:
                    self._execute(rules, registry, adapter, aggregator)
                except RunTimeout as e:
                    metrics.rules_timed_out_total.inc(len(e.pending))
                    logger.error(str(e), extra={"run_id": run_id, "pending_rules": e.pending})

            report = aggregator.finalize()

        metrics.record_run(report.overall_status.value, time.time())
        return report

    def _task(
        self,
        rule: Rule,
        registry: RuleRegistry,
        adapter: RowSourceAdapter,
        aggregator: ReportAggregator,
    ) -> None:
        result = self.executor.run(rule, adapter, check=registry.check_for(rule.id))
        try:
            aggregator.add(result)
        except RuntimeError:
            # finalized after a timeout; this rule is already reported as ERROR
            logger.warning(
                f"Discarding late result for rule {rule.id}",
                extra={"rule_id": rule.id, "run_id": aggregator.run_id},
            )

    def _execute(
        self,
        rules: list[Rule],
        registry: RuleRegistry,
        adapter: RowSourceAdapter,
        aggregator: ReportAggregator,
    ) -> None:
        queue: Queue[Rule] = Queue()
        for rule in rules:
            queue.put(rule)
        stop = threading.Event()

        def worker() -> None:
            while not stop.is_set():
                try:
                    rule = queue.get_nowait()
                except Empty:
                    return
                try:
                    self._task(rule, registry, adapter, aggregator)
                except Exception as e:
                    logger.error(
                        f"Rule task for {rule.id} failed: {e}",
                        extra={"rule_id": rule.id, "run_id": aggregator.run_id},
                        exc_info=True,
                    )

        # daemon threads, so a fetch abandoned after a timeout cannot hold up interpreter exit
        workers = [
            threading.Thread(target=worker, name=f"dq-rule-{i}", daemon=True)
            for i in range(min(self.concurrency, len(rules)))
        ]
        for thread in workers:
            thread.start()

        deadline = None if self.timeout_seconds is None else time.monotonic() + self.timeout_seconds
        for thread in workers:
            thread.join(None if deadline is None else max(deadline - time.monotonic(), 0))

        if any(thread.is_alive() for thread in workers):
            # queued rules are never started; running ones are abandoned
            stop.set()
            message = f"timed out after {self.timeout_seconds} seconds"
            pending = aggregator.pending
            for rule_id in pending:
                aggregator.mark_incomplete(rule_id, message)
            raise RunTimeout(self.timeout_seconds, pending)
