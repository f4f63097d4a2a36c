"""
Prometheus metrics for data-quality runs.

Metrics live on a private registry. A run writes them to a textfile for a
node-exporter textfile collector; a host process embedding the engine can
serve generate_metrics() itself.
"""
from pathlib import Path

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    write_to_textfile,
)

REGISTRY = CollectorRegistry()


# =======================
# RULE METRICS
# =======================

rules_evaluated_total = Counter(
    name="dq_rules_evaluated_total",
    documentation="Total number of rule evaluations",
    labelnames=["kind", "status"],  # status: PASS, FAIL, ERROR
    registry=REGISTRY,
)

violations_total = Counter(
    name="dq_violations_total",
    documentation="Total number of violations found",
    labelnames=["rule_id", "severity"],
    registry=REGISTRY,
)

rule_duration_seconds = Histogram(
    name="dq_rule_duration_seconds",
    documentation="Time spent fetching and evaluating one rule",
    labelnames=["kind"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 300.0],
    registry=REGISTRY,
)

# =======================
# SOURCE METRICS
# =======================

source_fetch_errors_total = Counter(
    name="dq_source_fetch_errors_total",
    documentation="Total number of failed source reads",
    labelnames=["table", "error_type"],  # error_type: SourceUnavailable, SchemaMismatch, ...
    registry=REGISTRY,
)

# =======================
# RUN METRICS
# =======================

runs_total = Counter(
    name="dq_runs_total",
    documentation="Total number of completed runs",
    labelnames=["status"],  # status: PASS, FAIL
    registry=REGISTRY,
)

rules_timed_out_total = Counter(
    name="dq_rules_timed_out_total",
    documentation="Rules abandoned because the run timeout expired",
    registry=REGISTRY,
)

last_run_timestamp_seconds = Gauge(
    name="dq_last_run_timestamp_seconds",
    documentation="Unix time of the last finalized run",
    labelnames=["status"],
    registry=REGISTRY,
)


def record_rule_result(kind: str, status: str, rule_id: str, severity: str,
                       violation_count: int, duration: float | None) -> None:
    """Record one finished rule evaluation."""
    rules_evaluated_total.labels(kind=kind, status=status).inc()
    if violation_count and status == "FAIL":
        violations_total.labels(rule_id=rule_id, severity=severity).inc(violation_count)
    if duration is not None:
        rule_duration_seconds.labels(kind=kind).observe(duration)


def record_fetch_error(table: str, error_type: str) -> None:
    source_fetch_errors_total.labels(table=table, error_type=error_type).inc()


def record_run(status: str, finished_at: float) -> None:
    runs_total.labels(status=status).inc()
    last_run_timestamp_seconds.labels(status=status).set(finished_at)


def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


def get_content_type() -> str:
    return CONTENT_TYPE_LATEST


def write_metrics_file(path: str | Path) -> None:
    """
    Write current metrics atomically for a textfile collector.

    Args:
        path: Destination file, conventionally ending in .prom
    """
    write_to_textfile(str(path), REGISTRY)
