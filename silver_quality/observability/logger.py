"""
Structured logging for silver-quality.

Every module logs through a child of the "silver_quality" logger, so one
call to setup_logger() configures the whole package. Rule and run context
travels as extra fields (rule_id, table, run_id) and shows up as
top-level keys in the JSON output.
"""
import logging
import os
import sys
import time
from datetime import datetime, timezone

from pythonjsonlogger import jsonlogger

ROOT_LOGGER_NAME = "silver_quality"

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(threadName)s] %(message)s"


class QualityJsonFormatter(jsonlogger.JsonFormatter):
    """
    One JSON object per line with UTC timestamp, level, logger, call site
    and worker thread.
    """

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record.setdefault(
            "timestamp",
            datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="milliseconds"),
        )
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName
        # rules run on dq-rule-N pool threads
        log_record["thread_name"] = record.threadName


def _build_handler(stream, format_type: str, level: int) -> logging.Handler:
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    if format_type == "json":
        handler.setFormatter(QualityJsonFormatter("%(message)s"))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: str | None = None,
    format_type: str | None = None,
    stream=None,
) -> logging.Logger:
    """
    Configure a logger with a single stream handler.

    Args:
        name: Logger name
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL (env LOG_LEVEL, default INFO)
        format_type: "json" or "text" (env LOG_FORMAT, default json)
        stream: Output stream; stderr by default so stdout carries only reports

    Returns:
        The configured logger
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = LOG_LEVELS.get(level_name, logging.INFO)
    format_type = (format_type or os.getenv("LOG_FORMAT", "json")).lower()

    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    logger.handlers.clear()
    logger.addHandler(_build_handler(stream, format_type, log_level))
    logger.propagate = False
    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Return a logger, configuring the package logger on first use.

    Names under "silver_quality." propagate to the package logger. Any
    other name gets its own handler.
    """
    if not logging.getLogger(ROOT_LOGGER_NAME).handlers:
        setup_logger(ROOT_LOGGER_NAME)

    logger = logging.getLogger(name)
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logger
    return logger if logger.handlers else setup_logger(name)


class log_operation:
    """
    Log the start, end and duration of a block.

    Usage:
        with log_operation("Data-quality run", logger=logger, run_id=run_id) as op:
            ...
        op.duration  # seconds
    """

    def __init__(self, operation_name: str, logger: logging.Logger | None = None, **extra_fields):
        self.operation_name = operation_name
        self.logger = logger or get_logger()
        self.extra_fields = extra_fields
        self.start_time: float | None = None
        self.duration: float | None = None

    def _fields(self, **fields) -> dict:
        return {"operation": self.operation_name, **fields, **self.extra_fields}

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.info(f"{self.operation_name} started", extra=self._fields())
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self.start_time
        elapsed = round(self.duration, 3)

        if exc_type is None:
            self.logger.info(
                f"{self.operation_name} finished in {elapsed}s",
                extra=self._fields(duration_seconds=elapsed, status="success"),
            )
        else:
            self.logger.error(
                f"{self.operation_name} failed after {elapsed}s",
                extra=self._fields(
                    duration_seconds=elapsed,
                    status="error",
                    error_type=exc_type.__name__,
                    error_message=str(exc_val),
                ),
                exc_info=True,
            )
        return False
