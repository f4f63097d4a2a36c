"""
Core data models for the silver-layer data-quality engine.

All models use Pydantic for runtime validation and serialize with
camelCase field names.
"""

from .report import OverallStatus, Report
from .rule import Rule, RuleKind, Severity
from .rule_result import RuleResult, RuleStatus
from .violation import Violation

__all__ = [
    "Rule",
    "RuleKind",
    "Severity",
    "Violation",
    "RuleResult",
    "RuleStatus",
    "Report",
    "OverallStatus",
]
