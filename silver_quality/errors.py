"""
Exception hierarchy for the data-quality engine.

Only InvalidRuleDefinition is fatal to a run. Source failures are caught by
the rule executor and surfaced as ERROR results.
"""

from collections.abc import Iterable


class DataQualityError(Exception):
    """Base class for all engine errors."""


class SourceUnavailable(DataQualityError):
    """Raised when a table or view cannot be reached."""

    def __init__(self, table: str, message: str):
        self.table = table
        self.message = message
        super().__init__(f"Source '{table}' unavailable: {message}")


class SchemaMismatch(DataQualityError):
    """Raised when a referenced column does not exist in a table."""

    def __init__(self, table: str, columns: Iterable[str]):
        self.table = table
        self.columns = sorted(columns)
        super().__init__(
            f"Table '{table}' is missing column(s): {', '.join(self.columns)}"
        )


class InvalidRuleDefinition(DataQualityError):
    """Raised when a rule specification is malformed."""

    def __init__(self, rule_id: str | None, message: str):
        self.rule_id = rule_id
        self.message = message
        prefix = f"[{rule_id}] " if rule_id else ""
        super().__init__(f"{prefix}{message}")


class RunTimeout(DataQualityError):
    """Raised internally when the run-level timeout expires."""

    def __init__(self, timeout_seconds: float, pending: Iterable[str]):
        self.timeout_seconds = timeout_seconds
        self.pending = list(pending)
        super().__init__(
            f"Run timed out after {timeout_seconds} seconds with "
            f"{len(self.pending)} rule(s) unfinished"
        )


class BatchConsumedError(DataQualityError):
    """Raised when a RowBatch is iterated a second time."""

    def __init__(self, table: str):
        self.table = table
        super().__init__(
            f"RowBatch for '{table}' was already consumed; fetch a fresh batch"
        )
