"""
Command-line interface for data-quality runs.

Usage:
    silver-quality run [--source postgres|spark] [--rules <path>] [options]
    silver-quality list-rules [--rules <path>] [--table <table>]
    silver-quality validate-rules [--rules <path>]
    silver-quality distinct --table <table> --column <column> [options]

Exit codes:
    0  every rule passed (or only WARNING rules failed, without --strict)
    1  an ERROR-severity rule failed, or a rule could not be evaluated
    2  invalid rule catalog, configuration or usage
"""

import argparse
import json
import sys
from pathlib import Path

from psycopg import OperationalError
from pyspark.sql import SparkSession

from silver_quality.core.models import Report, RuleStatus, Severity
from silver_quality.core.rules import RuleRegistry
from silver_quality.engine import RunController
from silver_quality.errors import DataQualityError, InvalidRuleDefinition
from silver_quality.observability import metrics
from silver_quality.observability.logger import ROOT_LOGGER_NAME, get_logger, setup_logger
from silver_quality.settings import Settings
from silver_quality.sources.base import RowSourceAdapter
from silver_quality.sources.postgres_source import PostgresSourceAdapter
from silver_quality.sources.spark_source import SparkSourceAdapter
from silver_quality.utils.validation import sanitize_sql_identifier, split_table_name
from silver_quality.warehouse.connection import DatabaseConnectionPool

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def create_spark_session(app_name: str = "SilverQuality") -> SparkSession:
    """
    Create Spark session for local evaluation.

    Args:
        app_name: Application name

    Returns:
        SparkSession
    """
    spark = SparkSession.builder \
        .appName(app_name) \
        .master("local[*]") \
        .config("spark.sql.adaptive.enabled", "true") \
        .config("spark.ui.enabled", "false") \
        .getOrCreate()

    return spark


def load_settings(args) -> Settings:
    """
    Merge environment settings with command-line overrides.

    Raises:
        ValueError: If a value is invalid (pydantic.ValidationError included)
        FileNotFoundError: If --env-file does not exist
    """
    settings = Settings.from_env(getattr(args, "env_file", None))

    overrides = {
        "rules_path": getattr(args, "rules", None),
        "concurrency": getattr(args, "concurrency", None),
        "timeout_seconds": getattr(args, "timeout", None),
        "sample_limit": getattr(args, "sample_limit", None),
        "db_host": getattr(args, "db_host", None),
        "db_port": getattr(args, "db_port", None),
        "db_name": getattr(args, "db_name", None),
        "db_user": getattr(args, "db_user", None),
        "db_password": getattr(args, "db_password", None),
        "db_schema": getattr(args, "db_schema", None),
        "log_level": getattr(args, "log_level", None),
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if not overrides:
        return settings
    return Settings.model_validate({**settings.model_dump(), **overrides})


def statement_timeout_ms(settings: Settings) -> int | None:
    """Per-query limit in milliseconds derived from the run timeout, None without one."""
    if settings.timeout_seconds is None:
        return None
    return max(int(settings.timeout_seconds * 1000), 1)


def open_adapter(args, settings: Settings) -> tuple[RowSourceAdapter, SparkSession | None]:
    """
    Build the row source selected by --source.

    Returns:
        The adapter, plus the Spark session to stop afterwards (None for postgres)
    """
    if args.source == "spark":
        spark = create_spark_session()
        adapter = SparkSourceAdapter(spark)
        if args.input_dir:
            try:
                tables = adapter.register_directory(args.input_dir)
            except DataQualityError:
                spark.stop()
                raise
            logger.info(f"Registered {len(tables)} file table(s) from {args.input_dir}")
        return adapter, spark

    pool = DatabaseConnectionPool(
        host=settings.db_host,
        port=settings.db_port,
        database=settings.db_name,
        user=settings.db_user,
        password=settings.db_password,
        max_size=max(settings.concurrency, 1),
        statement_timeout_ms=statement_timeout_ms(settings),
    )
    pool.open()
    return PostgresSourceAdapter(pool, default_schema=settings.db_schema), None


def exit_code_for(report: Report, strict: bool = False) -> int:
    """
    Map a report to a process exit code.

    Args:
        report: Finalized report
        strict: Treat failing WARNING rules like ERROR rules

    Returns:
        EXIT_OK or EXIT_FAILED
    """
    for result in report.results:
        if result.status == RuleStatus.ERROR:
            return EXIT_FAILED
        if result.status == RuleStatus.FAIL and (strict or result.severity == Severity.ERROR):
            return EXIT_FAILED
    return EXIT_OK


def format_report_text(report: Report) -> str:
    """Render a report as a plain-text table with violation samples."""
    summary = report.summary
    lines = [
        "=" * 80,
        f"DATA QUALITY REPORT  run={report.run_id}",
        f"Timestamp: {report.timestamp.isoformat()}",
        f"Overall: {report.overall_status.value}  "
        f"(pass={summary['pass']} fail={summary['fail']} error={summary['error']})",
        "=" * 80,
        f"{'Rule':<45} {'Status':<7} {'Severity':<9} {'Violations':>10}",
        "-" * 80,
    ]
    for result in report.results:
        lines.append(
            f"{result.rule_id:<45} {result.status.value:<7} "
            f"{result.severity.value:<9} {result.violation_count:>10}"
        )

    for result in report.results:
        if result.status == RuleStatus.ERROR:
            lines.append("")
            lines.append(f"{result.rule_id}: {result.error_message}")
        elif result.violations:
            lines.append("")
            lines.append(f"{result.rule_id}:")
            for violation in result.violations:
                details = json.dumps(violation.details, default=str, sort_keys=True)
                lines.append(f"  - {violation.row_identifier!r} {details}")
            hidden = result.violation_count - len(result.violations)
            if hidden > 0:
                lines.append(f"  ... {hidden} more")

    lines.append("=" * 80)
    return "\n".join(lines)


def run_command(args) -> int:
    """
    Execute every selected rule and emit the report.

    Args:
        args: Command-line arguments
    """
    settings = load_settings(args)
    setup_logger(ROOT_LOGGER_NAME, level=settings.log_level, format_type=settings.log_format)

    registry = RuleRegistry.from_file(settings.rules_path)
    controller = RunController(
        concurrency=settings.concurrency,
        timeout_seconds=settings.timeout_seconds,
        sample_limit=settings.sample_limit,
    )
    # fail on unknown --rule ids before touching the warehouse
    registry.select(rule_ids=args.rule, tables=args.table)

    try:
        adapter, spark = open_adapter(args, settings)
    except (DataQualityError, OperationalError) as e:
        logger.error(f"Row source unavailable: {e}")
        return EXIT_FAILED

    try:
        with adapter:
            report = controller.run_all(registry, adapter, rule_ids=args.rule, tables=args.table)
    finally:
        if spark is not None:
            spark.stop()

    if args.output == "json":
        rendered = report.to_json()
    else:
        rendered = format_report_text(report)

    if args.out_file:
        Path(args.out_file).write_text(rendered + "\n")
        logger.info(f"Report written to {args.out_file}")
    else:
        print(rendered)

    if args.metrics_file:
        metrics.write_metrics_file(args.metrics_file)

    return exit_code_for(report, strict=args.strict)


def list_rules_command(args) -> int:
    """
    Print the rule catalog.

    Args:
        args: Command-line arguments
    """
    settings = load_settings(args)
    registry = RuleRegistry.from_file(settings.rules_path)
    rules = registry.select(tables=args.table)

    if args.output == "json":
        payload = [rule.model_dump(mode="json", by_alias=True) for rule in rules]
        print(json.dumps(payload, indent=2))
        return EXIT_OK

    print(f"{'Rule':<45} {'Kind':<24} {'Severity':<9} Tables")
    print("-" * 100)
    for rule in rules:
        print(f"{rule.id:<45} {rule.kind.value:<24} {rule.severity.value:<9} "
              f"{', '.join(rule.target_tables)}")
    print(f"\n{len(rules)} rule(s)")
    return EXIT_OK


def validate_rules_command(args) -> int:
    """
    Load and compile the rule catalog without touching any data.

    Args:
        args: Command-line arguments
    """
    settings = load_settings(args)
    registry = RuleRegistry.from_file(settings.rules_path)
    summary = registry.get_rule_summary()

    print(f"{settings.rules_path}: {summary['total_rules']} rule(s) OK")
    for kind, count in sorted(summary["rules_by_kind"].items()):
        print(f"  {kind:<24} {count:>4}")
    return EXIT_OK


def distinct_command(args) -> int:
    """
    Print the distinct values of one column.

    Args:
        args: Command-line arguments
    """
    settings = load_settings(args)
    split_table_name(args.table)
    sanitize_sql_identifier(args.column, "column")

    try:
        adapter, spark = open_adapter(args, settings)
    except (DataQualityError, OperationalError) as e:
        logger.error(f"Row source unavailable: {e}")
        return EXIT_FAILED

    try:
        with adapter:
            values = adapter.distinct_values(args.table, args.column)
    except DataQualityError as e:
        logger.error(str(e))
        return EXIT_FAILED
    finally:
        if spark is not None:
            spark.stop()

    if args.output == "json":
        print(json.dumps(values, default=str))
    else:
        for value in values:
            print("NULL" if value is None else value)
    return EXIT_OK


def _add_rules_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--rules",
        help="Path to rule catalog YAML (default: env DQ_RULES_PATH or config/silver_rules.yaml)"
    )
    parser.add_argument(
        "--env-file",
        help="Load environment variables from this .env file first"
    )


def _add_source_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--source",
        default="postgres",
        choices=["postgres", "spark"],
        help="Row source (default: postgres)"
    )
    parser.add_argument(
        "--input-dir",
        help="With --source spark: register CSV/JSON/Parquet files in this directory as tables"
    )

    # Database connection arguments
    parser.add_argument("--db-host", help="Database host (default: env DB_HOST or localhost)")
    parser.add_argument("--db-port", type=int, help="Database port (default: env DB_PORT or 5432)")
    parser.add_argument("--db-name", help="Database name (default: env DB_NAME or datawarehouse)")
    parser.add_argument("--db-user", help="Database user (default: env DB_USER or dq_reader)")
    parser.add_argument("--db-password", help="Database password (default: env DB_PASSWORD)")
    parser.add_argument(
        "--db-schema",
        help="Schema for unqualified table names (default: env DB_SCHEMA or public)"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="silver-quality",
        description="Declarative data-quality checks for the silver layer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run the shipped catalog against the warehouse
  silver-quality run --db-host warehouse.local --db-password secret

  # Run against exported files, JSON report to a file
  silver-quality run --source spark --input-dir exports/ --out-file report.json

  # Only the customer rules, failing on warnings too
  silver-quality run --table silver.crm_cust_info --strict --output text

  # Distinct values of a column
  silver-quality distinct --table silver.crm_cust_info --column cst_gndr
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Run command
    run_parser = subparsers.add_parser("run", help="Run data-quality rules")
    _add_rules_args(run_parser)
    _add_source_args(run_parser)
    run_parser.add_argument(
        "--rule",
        action="append",
        help="Only run this rule id (repeatable)"
    )
    run_parser.add_argument(
        "--table",
        action="append",
        help="Only run rules targeting this table (repeatable)"
    )
    run_parser.add_argument(
        "--concurrency",
        type=int,
        help="Rules evaluated in parallel (default: env DQ_CONCURRENCY or 4)"
    )
    run_parser.add_argument(
        "--timeout",
        type=float,
        help="Run-level timeout in seconds (default: env DQ_TIMEOUT_SECONDS, none)"
    )
    run_parser.add_argument(
        "--sample-limit",
        type=int,
        help="Violations kept per rule in the report (default: env DQ_SAMPLE_LIMIT, all)"
    )
    run_parser.add_argument(
        "--output",
        default="json",
        choices=["json", "text"],
        help="Report format (default: json)"
    )
    run_parser.add_argument("--out-file", help="Write the report here instead of stdout")
    run_parser.add_argument(
        "--metrics-file",
        help="Write Prometheus metrics here after the run (textfile collector format)"
    )
    run_parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit 1 when WARNING rules fail"
    )
    run_parser.add_argument("--log-level", help="Log level (default: env LOG_LEVEL or INFO)")

    # List rules command
    list_parser = subparsers.add_parser("list-rules", help="List the rule catalog")
    _add_rules_args(list_parser)
    list_parser.add_argument(
        "--table",
        action="append",
        help="Only list rules targeting this table (repeatable)"
    )
    list_parser.add_argument(
        "--output",
        default="text",
        choices=["json", "text"],
        help="Output format (default: text)"
    )

    # Validate rules command
    validate_parser = subparsers.add_parser("validate-rules", help="Check the rule catalog loads")
    _add_rules_args(validate_parser)

    # Distinct values command
    distinct_parser = subparsers.add_parser("distinct", help="List distinct values of a column")
    distinct_parser.add_argument("--env-file", help="Load environment variables from this .env file first")
    _add_source_args(distinct_parser)
    distinct_parser.add_argument("--table", required=True, help="Table name, optionally schema-qualified")
    distinct_parser.add_argument("--column", required=True, help="Column name")
    distinct_parser.add_argument(
        "--output",
        default="text",
        choices=["json", "text"],
        help="Output format (default: text)"
    )

    return parser


COMMANDS = {
    "run": run_command,
    "list-rules": list_rules_command,
    "validate-rules": validate_rules_command,
    "distinct": distinct_command,
}


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_USAGE

    try:
        return COMMANDS[args.command](args)
    except InvalidRuleDefinition as e:
        logger.error(f"Invalid rule catalog: {e}")
        return EXIT_USAGE
    except FileNotFoundError as e:
        logger.error(str(e))
        return EXIT_USAGE
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
