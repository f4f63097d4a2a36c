"""
Rule execution: executor, report aggregator and run controller.
"""

from .aggregator import ReportAggregator
from .controller import RunController
from .executor import RuleExecutor

__all__ = [
    "RuleExecutor",
    "ReportAggregator",
    "RunController",
]
